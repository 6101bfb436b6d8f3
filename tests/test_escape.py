import pytest

from tome.escape import escape_attr, escape_text


def test_passthrough_for_plain_text():
    assert escape_text("Hello world") == "Hello world"


def test_escapes_ampersand():
    assert escape_text("R&D") == "R&amp;D"


def test_escapes_angle_brackets_and_quotes():
    assert (
        escape_text("<a href=\"x\">'y'</a>")
        == "&lt;a href=&quot;x&quot;&gt;&#39;y&#39;&lt;/a&gt;"
    )


def test_unicode_passes_through():
    assert escape_text("café — résumé") == "café — résumé"


def test_empty_string():
    assert escape_text("") == ""


def test_ampersand_not_double_processed():
    assert escape_text("&lt;") == "&amp;lt;"


@pytest.mark.parametrize(
    "raw",
    ["plain", "R&D", "<tag attr=\"v\">", "it's", "a & b < c > d \" e ' f"],
)
def test_attr_matches_text(raw):
    assert escape_attr(raw) == escape_text(raw)


@pytest.mark.parametrize("raw", ["<>&\"'", "x<y", "'quoted'"])
def test_no_special_characters_remain(raw):
    out = escape_text(raw)
    for ch in "<>\"'":
        assert ch not in out