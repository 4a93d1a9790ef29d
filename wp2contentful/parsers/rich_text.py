from __future__ import annotations

from typing import Any, Dict, List, Optional
import re

from bs4 import BeautifulSoup, NavigableString, Tag

from .rich_text_schema import (
    blockquote,
    code_block,
    document,
    heading,
    hr,
    hyperlink,
    list_container,
    list_item,
    mark,
    paragraph,
    table,
    text_node,
    validate_rich_text,
)


Mark = Dict[str, Any]

_INLINE_TAGS = {
    "span", "a", "strong", "b", "em", "i", "u", "s", "strike", "del", "ins", "code", "kbd", "samp",
    "img", "br", "sup", "sub", "small", "abbr", "cite", "q", "mark", "time", "var", "dfn", "font", "label",
}


def html_to_rich_text(html: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Convert HTML to a Contentful rich text document.

    Returns ``None`` for absent or blank input.

    Covered:
    - Headings, paragraphs, links, inline emphasis, lists, blockquote,
      divider (hr), code (inline and block), tables.
    - Images become hyperlinks to their source, labelled with the alt text.
    """
    if not html or not html.strip():
        return None

    # Pre-process to remove WordPress shortcodes like [caption]
    cleaned_html = re.sub(r'\[/?caption[^\]]*\]', '', html, flags=re.IGNORECASE)

    soup = BeautifulSoup(cleaned_html, "html.parser")

    # Remove scripts/styles
    for bad in soup.find_all(["script", "style"]):
        bad.decompose()

    # Normalize &nbsp; by replacing with regular spaces
    def normalize_ws(text: str) -> str:
        return (text or "").replace("\xa0", " ")

    nodes: List[Dict[str, Any]] = []

    def build_inline_from_nodes(children_iter, active: List[Mark]) -> List[Dict[str, Any]]:
        parts: List[Dict[str, Any]] = []

        def flush_text(s: str):
            s = normalize_ws(s)
            # keep single spaces between inline elements, drop layout newlines
            if s.strip() or (parts and not s.strip(" ")):
                parts.append(text_node(s, list(active)))

        for child in children_iter:
            if isinstance(child, NavigableString):
                flush_text(str(child))
                continue
            if not isinstance(child, Tag):
                continue
            name = (child.name or "").lower()

            if name == "br":
                parts.append(text_node("\n", list(active)))
                continue

            if name == "img":
                src = child.get("src") or ""
                alt = child.get("alt") or src
                if src:
                    parts.append(hyperlink(src, [text_node(alt, list(active))]))
                continue

            new_active = list(active)
            if name in ("strong", "b"):
                new_active.append(mark("bold"))
            elif name in ("em", "i"):
                new_active.append(mark("italic"))
            elif name == "u":
                new_active.append(mark("underline"))
            elif name in ("code", "kbd", "samp"):
                new_active.append(mark("code"))
            elif name == "sup":
                new_active.append(mark("superscript"))
            elif name == "sub":
                new_active.append(mark("subscript"))

            inner = build_inline_from_nodes(child.children, new_active)
            href = child.get("href") if name == "a" else None
            if href:
                # Hyperlinks may only hold text nodes
                texts = [n for n in inner if n["nodeType"] == "text"]
                for nested in (n for n in inner if n["nodeType"] == "hyperlink"):
                    texts.extend(nested["content"])
                if texts:
                    parts.append(hyperlink(href, texts))
                continue
            parts.extend(inner)
        return parts

    def build_inline(node: Tag) -> List[Dict[str, Any]]:
        return build_inline_from_nodes(node.children, [])

    def handle_block(el: Tag):
        name = (el.name or "").lower()
        if name in {"p", "div", "section", "article", "figure", "figcaption"}:
            # Nested block children are handled on their own
            if any(isinstance(c, Tag) and not is_inline_tag(c.name) for c in el.children):
                walk(el)
                return
            inlines = build_inline(el)
            if inlines:
                nodes.append(paragraph(inlines))
            return
        if name in {"h1", "h2", "h3", "h4", "h5", "h6"}:
            inlines = build_inline(el)
            if inlines:
                nodes.append(heading(int(name[1]), inlines))
            return
        if name in {"ul", "ol"}:
            nodes.append(build_list(el))
            return
        if name == "blockquote":
            paragraphs = []
            blocks = el.find_all("p", recursive=False)
            for block in blocks or [el]:
                inlines = build_inline(block)
                if inlines:
                    paragraphs.append(paragraph(inlines))
            if paragraphs:
                nodes.append(blockquote(paragraphs))
            return
        if name == "hr":
            nodes.append(hr())
            return
        if name == "pre":
            code_child = el.find("code")
            text = code_child.get_text() if code_child else el.get_text()
            nodes.append(code_block(normalize_ws(text)))
            return
        if name == "table":
            rows: List[List[str]] = []
            for tr in el.find_all("tr"):
                cells = [cell.get_text(" ", strip=True) for cell in tr.find_all(["td", "th"], recursive=False)]
                if cells:
                    rows.append(cells)
            if rows:
                first_row = el.find("tr")
                header_rows = 1 if first_row and first_row.find("th") else 0
                width = max(len(r) for r in rows)
                rows = [r + [""] * (width - len(r)) for r in rows]
                nodes.append(table(rows, header_rows=header_rows))
            return
        if name == "iframe":
            src = el.get("src") or ""
            if src:
                nodes.append(paragraph([hyperlink(src, [text_node(src)])]))
            return

        # Fallback: treat unknown blocks as paragraph text
        txt = el.get_text(" ", strip=True)
        if txt:
            nodes.append(paragraph([text_node(normalize_ws(txt))]))

    def build_list(el: Tag) -> Dict[str, Any]:
        items: List[Dict[str, Any]] = []
        for li in el.find_all("li", recursive=False):
            inline_children = [c for c in li.children if not (isinstance(c, Tag) and c.name in ("ul", "ol"))]
            blocks: List[Dict[str, Any]] = []
            inlines = build_inline_from_nodes(inline_children, [])
            blocks.append(paragraph(inlines))
            for sub in li.find_all(["ul", "ol"], recursive=False):
                blocks.append(build_list(sub))
            items.append(list_item(blocks))
        return list_container(el.name.lower() == "ol", items)

    def is_inline_tag(t: Optional[str]) -> bool:
        return bool(t) and t.lower() in _INLINE_TAGS

    def walk(container) -> None:
        # Coalesce inline siblings into a single paragraph
        inline_run: List[Any] = []

        def flush_inline_run():
            if not inline_run:
                return
            inlines = build_inline_from_nodes(inline_run, [])
            if inlines:
                nodes.append(paragraph(inlines))
            inline_run.clear()

        for child in container.children:
            if isinstance(child, NavigableString):
                # a blank line separates paragraphs in WordPress bodies
                for index, chunk in enumerate(re.split(r"\n[ \t]*\n", str(child))):
                    if index:
                        flush_inline_run()
                    if chunk.strip():
                        inline_run.append(NavigableString(chunk))
                continue
            if isinstance(child, Tag) and is_inline_tag(child.name):
                inline_run.append(child)
                continue
            flush_inline_run()
            if isinstance(child, Tag):
                handle_block(child)

        flush_inline_run()

    walk(soup.body if soup.body else soup)

    return validate_rich_text(document(nodes))
