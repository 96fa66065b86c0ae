"""ScholarVox URLs, CSS selectors, marker strings, and print calibration."""

# ── URLs ─────────────────────────────────────────────────────────────────────

SCHOLARVOX_DOMAIN = "scholarvox.com"
SCHOLARVOX_BASE = "https://univ.scholarvox.com"
SCHOLARVOX_HOME_URL = f"{SCHOLARVOX_BASE}/"
SCHOLARVOX_SSO_URL = f"{SCHOLARVOX_BASE}/saml-sp/viacesi"
SCHOLARVOX_WAYF_URL = f"{SCHOLARVOX_BASE}/{{slug}}wayf"
SCHOLARVOX_CATALOG_URL = f"{SCHOLARVOX_BASE}/catalog/book/docid/{{docid}}"
SCHOLARVOX_READER_URL = f"{SCHOLARVOX_BASE}/reader/docid/{{docid}}/page/{{page}}"

# Post-login navigation must land back on the platform
PLATFORM_URL_PATTERN = r"scholarvox\.com"
ERROR_URL_PATTERN = r"404|not[-_ ]found|error"

# ── Cookies ──────────────────────────────────────────────────────────────────

SESSION_COOKIE_PATTERN = r"^sfsessid"
AUX_COOKIE_PATTERNS = {
    "xpriv": r"^_xpriv",
    "posthog": r"posthog",
    "visitor": r"visitor_unique",
}

# ── CSS Selectors ────────────────────────────────────────────────────────────

SELECTORS = {
    # Login entry
    "login_button": "a.btn_login, #pnl-login a.btn_login",

    # Catalog page
    "removed_flag": ".removedFlag",
    "not_available": "#pnl-notavail, .notAvailableBox",
    "catalog_title": ".item.book .title h2, .book-title, h1, h2",
    "meta_pages": "div.leftColumn p, div.rightColumn p, .showRoom p",

    # Reader
    "iframe": "iframe",
    "page_container": "#page-container",
    "sidebar": "#sidebar",
}

# Ordered from most to least specific; first match wins.
META_TITLE_SELECTORS = [
    ".title h2",
    ".book-title",
    "main h1, .content h1, .book-info h1",
]

EMAIL_INPUT_SELECTORS = [
    'input[type="email"]',
    'input[name="email"]',
    'input[name="login"]',
    'input[name="username"]',
    'input[id*="email"]',
    'input[id*="user"]',
    'input[placeholder*="mail"]',
    'input[placeholder*="user"]',
]

PASSWORD_INPUT_SELECTORS = [
    'input[type="password"]',
]

SUBMIT_SELECTORS = [
    'button[type="submit"]',
    'input[type="submit"]',
]

PAGE_ELEMENT_SELECTORS = [
    '[class*="page"]',
    '[id*="page"]',
    "body > div:first-child",
]

# ── Marker Strings ───────────────────────────────────────────────────────────

REMOVED_MESSAGE = "cet ouvrage n'est plus disponible"
AVAILABLE_SOON_MESSAGE = "cet ouvrage sera bientôt disponible"
AUTH_WALL_MESSAGE = (
    "Pour consulter cet ouvrage dans son intégralité, veuillez vous authentifier"
)

# ── Print Calibration ────────────────────────────────────────────────────────

CSS_DPI = 96
REFERENCE_WIDTH_PX = 1080
REFERENCE_SCALE = 0.4
MIN_PRINT_SCALE = 0.1
MAX_PRINT_SCALE = 2.0

# Render candidates smaller than this area are ignored
LARGE_CONTENT_AREA = 1500 * 1500
MIN_CONTENT_SIDE_PX = 10
