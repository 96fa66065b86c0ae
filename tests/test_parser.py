"""Tests for catalog HTML parsing."""

from voxfetch.catalog.parser import parse_title, parse_total_pages, sanitize_title

CATALOG_HTML = """
<html><body>
  <h1>ScholarVox</h1>
  <div class="item book">
    <div class="title"><h2>  Algorithmique
        et programmation </h2></div>
  </div>
  <div class="leftColumn">
    <p>Éditeur : Dunod</p>
    <p>Année : 2019</p>
  </div>
  <div class="rightColumn">
    <p>Pages : 432</p>
    <p>ISBN : 9782100791750</p>
  </div>
</body></html>
"""


def test_title_uses_most_specific_selector():
    assert parse_title(CATALOG_HTML) == "Algorithmique et programmation"


def test_title_falls_back_to_content_heading():
    html = '<html><body><main><h1>Réseaux</h1></main></body></html>'
    assert parse_title(html) == "Réseaux"


def test_title_missing():
    assert parse_title("<html><body><p>nothing</p></body></html>") is None


def test_pages_from_detail_column():
    assert parse_total_pages(CATALOG_HTML) == 432


def test_pages_from_body_text():
    html = "<html><body><div>Nombre de pages : 210 - 2021</div></body></html>"
    assert parse_total_pages(html) == 210


def test_pages_ignores_unlabelled_numbers():
    html = "<html><body><p>Année : 2019</p><p>ISBN : 9782100791750</p></body></html>"
    assert parse_total_pages(html) is None


def test_sanitize_title():
    assert sanitize_title('C++ : le guide "complet" / 2e éd.') == "C++-le-guide-complet-2e-éd."


def test_sanitize_title_truncates():
    assert len(sanitize_title("a" * 300)) == 100
