"""Tests for print scale and page geometry."""

import pytest

from voxfetch.models.book import PageGeometry, compute_print_scale
from voxfetch.reader import scripts
from voxfetch.reader.capture import measure_content, pdf_options

from .conftest import FakePage


def test_reference_width_keeps_reference_scale():
    assert compute_print_scale(1080) == pytest.approx(0.4)


def test_scale_grows_with_width():
    assert compute_print_scale(2160) == pytest.approx(0.8)
    assert compute_print_scale(540) == pytest.approx(0.2)


def test_explicit_scale_overrides_auto():
    assert compute_print_scale(2160, scale=0.6) == 0.6


def test_geometry_from_pixels_uses_css_dpi():
    geometry = PageGeometry.from_pixels(1080, 1332, "largest image")

    assert geometry.width_in == pytest.approx(11.25)
    assert geometry.height_in == pytest.approx(13.875)
    assert geometry.scale == pytest.approx(0.4)
    assert geometry.source == "largest image"


def test_geometry_keeps_auto_scale_next_to_override():
    geometry = PageGeometry.from_pixels(2160, 2664, scale=1.0)
    assert geometry.auto_scale == pytest.approx(0.8)
    assert geometry.scale == 1.0


def test_pdf_options_match_content_size():
    options = pdf_options(PageGeometry.from_pixels(1080, 1332))

    assert options["width"] == "11.25in"
    assert options["height"] == "13.875in"
    assert options["print_background"] is True
    assert options["prefer_css_page_size"] is False
    assert set(options["margin"].values()) == {"0mm"}
    assert options["scale"] == pytest.approx(0.4)


@pytest.mark.parametrize("width,expected", [(6000, 2.0), (100, 0.1)])
def test_pdf_options_clamp_scale(width, expected):
    geometry = PageGeometry.from_pixels(width, 1000)
    assert pdf_options(geometry)["scale"] == expected


async def test_measure_content_reads_page_dimensions():
    page = FakePage(scripts={
        scripts.MEASURE_CONTENT: {"width": 2160, "height": 2664, "source": "largest image"},
        scripts.BODY_METRICS: {
            "viewportWidth": 2800,
            "viewportHeight": 2100,
            "scrollWidth": 2800,
            "scrollHeight": 90000,
        },
    })

    geometry = await measure_content(page)

    assert geometry.width_in == pytest.approx(22.5)
    assert geometry.scale == pytest.approx(0.8)
    assert geometry.source == "largest image"
