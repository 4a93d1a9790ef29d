import pytest
pytest.importorskip("bs4")

from wp2contentful.parsers.rich_text import html_to_rich_text


def nodes_of_type(doc, t):
    return [n for n in doc.get("content", []) if n.get("nodeType") == t]


def texts_of(node):
    return [c for c in node.get("content", []) if c.get("nodeType") == "text"]


def test_empty_input_gives_none():
    assert html_to_rich_text(None) is None
    assert html_to_rich_text("   ") is None


def test_paragraph_heading_and_link():
    html = """
    <h2>Title</h2>
    <p>Hello <strong>world</strong> <a href="https://ex.com">link</a>.</p>
    """
    doc = html_to_rich_text(html)
    assert doc["nodeType"] == "document"
    assert len(nodes_of_type(doc, "heading-2")) == 1
    para = nodes_of_type(doc, "paragraph")[0]
    bold = [t for t in texts_of(para) if {"type": "bold"} in t["marks"]]
    assert bold and bold[0]["value"] == "world"
    links = [c for c in para["content"] if c["nodeType"] == "hyperlink"]
    assert links[0]["data"]["uri"] == "https://ex.com"
    assert links[0]["content"][0]["value"] == "link"


def test_lists_blockquote_and_hr():
    html = """
    <ul><li>one</li><li>two</li></ul>
    <ol><li>first</li></ol>
    <blockquote>quote</blockquote>
    <hr/>
    """
    doc = html_to_rich_text(html)
    bullets = nodes_of_type(doc, "unordered-list")
    assert len(bullets) == 1
    assert [item["nodeType"] for item in bullets[0]["content"]] == ["list-item", "list-item"]
    assert bullets[0]["content"][0]["content"][0]["nodeType"] == "paragraph"
    assert len(nodes_of_type(doc, "ordered-list")) == 1
    quote = nodes_of_type(doc, "blockquote")[0]
    assert quote["content"][0]["nodeType"] == "paragraph"
    assert len(nodes_of_type(doc, "hr")) == 1


def test_plain_text_with_blank_lines_becomes_paragraphs():
    doc = html_to_rich_text("First line\n\nSecond <em>line</em>")
    paras = nodes_of_type(doc, "paragraph")
    assert len(paras) == 2
    assert paras[1]["content"][-1]["marks"] == [{"type": "italic"}]


def test_code_block_and_image():
    html = """
    <pre><code>line1
line2</code></pre>
    <p><img src="http://ex.com/a.jpg" alt="A"/></p>
    """
    doc = html_to_rich_text(html)
    paras = nodes_of_type(doc, "paragraph")
    code = [t for p in paras for t in texts_of(p) if {"type": "code"} in t["marks"]]
    assert code and "line1\nline2" in code[0]["value"]
    image_links = [c for p in paras for c in p["content"] if c["nodeType"] == "hyperlink"]
    assert image_links[0]["data"]["uri"] == "http://ex.com/a.jpg"
    assert image_links[0]["content"][0]["value"] == "A"


def test_table_with_header_row():
    html = "<table><tr><th>A</th><th>B</th></tr><tr><td>1</td><td>2</td></tr></table>"
    doc = html_to_rich_text(html)
    tables = nodes_of_type(doc, "table")
    assert len(tables) == 1
    rows = tables[0]["content"]
    assert rows[0]["content"][0]["nodeType"] == "table-header-cell"
    assert rows[1]["content"][1]["nodeType"] == "table-cell"


def test_caption_shortcode_and_scripts_removed():
    html = '[caption id="x"]<p>Visible</p>[/caption]<script>alert(1)</script>'
    doc = html_to_rich_text(html)
    values = [t["value"] for p in nodes_of_type(doc, "paragraph") for t in texts_of(p)]
    assert values == ["Visible"]


def test_small_and_other_inline_tags_stay_in_paragraph():
    doc = html_to_rich_text("<p>Price <small>incl. VAT</small> today, press <kbd>Enter</kbd> <abbr>ASAP</abbr></p>")
    paras = nodes_of_type(doc, "paragraph")
    assert len(paras) == 1
    values = "".join(t["value"] for t in texts_of(paras[0]))
    assert values == "Price incl. VAT today, press Enter ASAP"
    kbd = [t for t in texts_of(paras[0]) if t["value"] == "Enter"]
    assert kbd[0]["marks"] == [{"type": "code"}]


def test_top_level_inline_tags_are_coalesced():
    doc = html_to_rich_text("Call <q>now</q> or <mark>later</mark>")
    assert [n["nodeType"] for n in doc["content"]] == ["paragraph"]


def test_empty_heading_is_not_emitted():
    doc = html_to_rich_text("<h3></h3><p>x</p>")
    assert nodes_of_type(doc, "heading-3") == []
