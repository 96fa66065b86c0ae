"""JavaScript snippets evaluated inside the reader's iframe-content page.

Each snippet is a function expression taking at most one argument, so it
can be passed straight to ``page.evaluate(script, arg)``.
"""

IFRAME_SRC = """() => {
  const iframe = document.querySelector("iframe");
  return iframe ? iframe.src || null : null;
}"""

COUNT_PAGES = """(selector) => {
  const container = document.querySelector(selector);
  return container ? container.children.length : 0;
}"""

SCROLL_TO_PAGE = """([selector, index]) => {
  const container = document.querySelector(selector);
  if (!container) return false;
  const el = container.children[index];
  if (!el) return false;
  el.scrollIntoView({ behavior: "auto", block: "start" });
  return true;
}"""

ISOLATE_PAGE = """([selector, sidebarSelector, index]) => {
  const container = document.querySelector(selector);
  if (!container) return false;
  Array.from(container.children).forEach((el, i) => {
    if (i === index) {
      el.style.display = "block";
      el.style.visibility = "visible";
    } else {
      el.style.display = "none";
    }
  });
  const sidebar = document.querySelector(sidebarSelector);
  if (sidebar) sidebar.style.display = "none";
  return true;
}"""

LOAD_FONTS = """async () => {
  const fonts = Array.from(document.fonts);
  await Promise.all(fonts.map(f => f.load().catch(() => {})));
  await document.fonts.ready;
  const after = Array.from(document.fonts);
  return {
    total: after.length,
    loaded: after.filter(f => f.status === "loaded").length,
    families: [...new Set(after.map(f => f.family))],
  };
}"""

# Transforms are left alone; only zoom, overflow, size caps and clip-path go.
STRIP_CLIPPING = """() => {
  const html = document.documentElement;
  const body = document.body;
  html.style.zoom = "1";
  body.style.zoom = "1";
  html.style.overflow = "visible";
  body.style.overflow = "visible";
  body.style.overflowX = "visible";
  body.style.overflowY = "visible";
  body.style.width = "auto";
  body.style.height = "auto";
  body.style.maxWidth = "none";
  body.style.maxHeight = "none";
  body.style.minWidth = "0";
  body.style.minHeight = "0";

  let adjusted = 0;
  document.querySelectorAll("div").forEach(div => {
    const cs = window.getComputedStyle(div);
    let touched = false;
    if (cs.overflow !== "visible") {
      div.style.overflow = "visible";
      div.style.overflowX = "visible";
      div.style.overflowY = "visible";
      touched = true;
    }
    if (cs.maxWidth !== "none" && cs.maxWidth !== "") {
      div.style.maxWidth = "none";
      touched = true;
    }
    if (cs.maxHeight !== "none" && cs.maxHeight !== "") {
      div.style.maxHeight = "none";
      touched = true;
    }
    if (cs.clipPath !== "none") {
      div.style.clipPath = "none";
      touched = true;
    }
    if (touched) adjusted++;
  });

  document.querySelectorAll("canvas").forEach(canvas => {
    canvas.style.maxWidth = "none";
    canvas.style.maxHeight = "none";
  });
  document.querySelectorAll("svg").forEach(svg => {
    svg.style.maxWidth = "none";
    svg.style.maxHeight = "none";
    svg.style.overflow = "visible";
  });
  return adjusted;
}"""

NUDGE_AND_DECODE = """async (dy) => {
  window.scrollBy(0, dy);
  await Promise.all(
    Array.from(document.images).map(img => img.decode().catch(() => {}))
  );
}"""

# Ties keep insertion order, so images beat canvases beat background divs.
PICK_CANDIDATE = """(minArea) => {
  document
    .querySelectorAll("[data-voxfetch-candidate]")
    .forEach(el => el.removeAttribute("data-voxfetch-candidate"));

  const candidates = [];
  Array.from(document.images).forEach(img => {
    const area = img.naturalWidth * img.naturalHeight;
    if (area > minArea) candidates.push({ el: img, area, kind: "img" });
  });
  document.querySelectorAll("canvas").forEach(cv => {
    const area = cv.width * cv.height;
    if (area > minArea) candidates.push({ el: cv, area, kind: "canvas" });
  });
  document.querySelectorAll("div").forEach(div => {
    const r = div.getBoundingClientRect();
    const area = r.width * r.height;
    const bg = getComputedStyle(div).backgroundImage;
    if (area > minArea && bg && bg !== "none")
      candidates.push({ el: div, area, kind: "div" });
  });
  if (candidates.length === 0) return null;

  candidates.sort((a, b) => b.area - a.area);
  const { el, kind } = candidates[0];
  el.setAttribute("data-voxfetch-candidate", "1");
  el.scrollIntoView({ block: "center" });

  if (kind === "img")
    return { kind, width: el.naturalWidth, height: el.naturalHeight, complete: el.complete };
  if (kind === "canvas")
    return { kind, width: el.width, height: el.height, complete: true };
  const r = el.getBoundingClientRect();
  return { kind, width: Math.round(r.width), height: Math.round(r.height), complete: true };
}"""

READ_CANVAS_PIXELS = """(points) => {
  const cv = document.querySelector("canvas[data-voxfetch-candidate]");
  if (!cv) return null;
  const ctx = cv.getContext("2d");
  if (!ctx) return null;
  return points.map(([x, y]) => {
    try {
      return Array.from(ctx.getImageData(x, y, 1, 1).data);
    } catch (e) {
      return null;
    }
  });
}"""

HAS_TEXT = """(needle) => {
  const text = document.body ? document.body.innerText : "";
  return text.includes(needle);
}"""

MEASURE_CONTENT = """(selectors) => {
  let largest = null;
  let maxArea = 0;
  Array.from(document.images).forEach(img => {
    const area = img.naturalWidth * img.naturalHeight;
    if (area > maxArea) {
      maxArea = area;
      largest = img;
    }
  });
  if (largest && largest.naturalWidth > 0 && largest.naturalHeight > 0)
    return {
      width: largest.naturalWidth,
      height: largest.naturalHeight,
      source: "image natural dimensions",
    };

  for (const selector of selectors) {
    const el = document.querySelector(selector);
    if (!el) continue;
    const r = el.getBoundingClientRect();
    if (r.width > 0 && r.height > 0)
      return { width: r.width, height: r.height, source: "page element" };
  }
  return { width: window.innerWidth, height: window.innerHeight, source: "window" };
}"""

BODY_METRICS = """() => ({
  scrollWidth: document.body.scrollWidth,
  scrollHeight: document.body.scrollHeight,
  viewportWidth: window.innerWidth,
  viewportHeight: window.innerHeight,
})"""
