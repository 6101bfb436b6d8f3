import pytest

from tome.link import AllAvailableResolver, LinkResolver, LinkStatus, NoopLinkResolver
from tome.render import (
    RenderOptions,
    Renderer,
    collect_text,
    split_external_link,
    url_encode_title,
)
from tome.wikiparse import Link, Template, Text


def render(wikitext):
    return Renderer(NoopLinkResolver()).render(wikitext)


def render_with_available(wikitext):
    return Renderer(AllAvailableResolver()).render(wikitext)


class _RedirectResolver(LinkResolver):
    def resolve_internal(self, target):
        return LinkStatus.redirect("New Title")


def test_empty_input_renders_to_empty():
    assert render("") == ""


def test_plain_paragraph_wraps_in_p():
    assert render("Hello world") == "<p>Hello world</p>"


def test_bold_and_italic_emit_strong_and_em():
    assert render("'''photon''' is ''bright''") == (
        "<p><strong>photon</strong> is <em>bright</em></p>"
    )


def test_heading_starts_at_h2_by_default():
    out = render("== Section ==")
    assert "<h2>" in out
    assert "Section" in out
    assert "</h2>" in out


def test_heading_clamps_h1_up_to_h2():
    assert "<h2>TopLevel</h2>" in render("= TopLevel =")


def test_heading_options_change_bounds():
    renderer = Renderer(NoopLinkResolver()).with_options(
        RenderOptions(min_heading_level=1, max_heading_level=4)
    )
    assert "<h1>Top</h1>" in renderer.render("= Top =")
    assert "<h4>Deep</h4>" in renderer.render("====== Deep ======")


def test_html_special_chars_in_text_are_escaped():
    assert render("R&D <stuff>") == "<p>R&amp;D &lt;stuff&gt;</p>"


def test_missing_internal_link_marked_with_class():
    out = render("See [[Photon]] for more.")
    assert "tome-missing" in out
    assert "Photon" in out


def test_available_internal_link_has_no_missing_class():
    out = render_with_available("See [[Photon]] for more.")
    assert "tome-missing" not in out
    assert 'href="#/article/Photon"' in out


def test_redirect_link_points_at_redirect_target():
    out = Renderer(_RedirectResolver()).render("[[Old]]")
    assert out == '<p><a href="#/article/New_Title" class="tome-wikilink">Old</a></p>'


def test_piped_link_uses_display_text():
    out = render_with_available("See [[Photon|the bright thing]] please.")
    assert 'href="#/article/Photon"' in out
    assert "the bright thing" in out


def test_external_link_renders_with_target_blank():
    out = render("Go to [https://example.com Example].")
    assert 'href="https://example.com"' in out
    assert 'target="_blank"' in out
    assert 'rel="noopener noreferrer"' in out
    assert ">Example<" in out


def test_external_link_without_label_uses_url():
    assert ">https://example.com<" in render("Go to [https://example.com].")


def test_unordered_list_emits_ul_li():
    out = render("* alpha\n* beta\n* gamma")
    assert "<ul>" in out
    assert "<li>alpha</li>" in out
    assert "<li>beta</li>" in out
    assert "<li>gamma</li>" in out


def test_ordered_list_emits_ol_li():
    out = render("# first\n# second")
    assert "<ol>" in out
    assert "<li>first</li>" in out
    assert "<li>second</li>" in out


def test_definition_list_emits_dt_dd():
    assert render("; term : details") == "<dl><dt>term</dt><dd>details</dd></dl>"


def test_template_renders_as_placeholder():
    out = render("{{infobox|name=Photon|kind=particle}}")
    assert "tome-template-placeholder" in out
    assert "Template:" in out
    assert "infobox" in out


def test_image_renders_as_placeholder():
    out = render("[[File:Cat.jpg|A cat]]")
    assert "tome-image-placeholder" in out
    assert "[Image: File:Cat.jpg]" in out


def test_category_is_not_rendered():
    assert render("[[Category:Physics]]") == ""


def test_ref_tag_collected_as_footnote():
    out = render("Photons are real.<ref>Some source 1.</ref> Honest.<ref>Source 2.</ref>")
    assert "tome-ref" in out
    assert "[1]" in out
    assert "[2]" in out
    assert "tome-references" in out
    assert "Some source 1." in out
    assert "Source 2." in out
    assert out.endswith('<li id="ref-2">Source 2.</li></ol></section>')


def test_paragraph_break_splits_into_two_paragraphs():
    out = render("First paragraph.\n\nSecond paragraph.")
    assert out.count("<p>") >= 2


def test_unclosed_bold_is_auto_closed_at_block_boundary():
    out = render("'''photon\n\nNext paragraph.")
    assert out.count("<strong>") == out.count("</strong>")


def test_nowiki_tag_emits_escaped_content():
    out = render("This is <nowiki>'''not bold'''</nowiki> here.")
    assert "&#39;&#39;&#39;not bold&#39;&#39;&#39;" in out
    assert "<strong>" not in out


def test_horizontal_rule_renders_as_hr():
    assert "<hr/>" in render("Above\n----\nBelow")


def test_preformatted_block():
    assert render(" code here") == '<pre class="tome-preformatted">code here</pre>'


def test_table_cells():
    out = render("{|\n|-\n! H1 !! H2\n|-\n| a || b\n|}")
    assert out.startswith('<table class="tome-table">')
    assert "<tr><th>H1</th><th>H2</th></tr>" in out
    assert "<tr><td>a</td><td>b</td></tr>" in out


def test_parse_failure_renders_raw_text_with_banner():
    depth = 150
    wikitext = "[[a|" * depth + "x<y" + "]]" * depth
    out = render(wikitext)
    assert out.startswith('<div class="tome-render-error">Parser error: ')
    assert '<pre class="tome-raw">' in out
    assert "x&lt;y" in out


def test_collect_text_flattens_links_and_templates():
    nodes = [Text("a"), Template([Text("b")]), Link("T", [])]
    assert collect_text(nodes) == "a{b}T"


@pytest.mark.parametrize(
    ("title", "expected"),
    [
        ("Photon", "Photon"),
        ("Speed of light", "Speed_of_light"),
        ("A#b?c", "A%23b%3Fc"),
        ("50% & more", "50%25_%26_more"),
        ("café", "café"),
    ],
)
def test_url_encode_title(title, expected):
    assert url_encode_title(title) == expected


def test_split_external_link_separates_url_and_label():
    assert split_external_link([Text("  https://example.com Some label")]) == (
        "https://example.com",
        " Some label",
    )
    assert split_external_link([Text("https://example.com")]) == ("https://example.com", "")