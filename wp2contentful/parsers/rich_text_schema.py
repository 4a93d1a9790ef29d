from __future__ import annotations

from typing import Any, Dict, List, Optional


# --- Builders for common rich text nodes ---

def document(content: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"nodeType": "document", "data": {}, "content": content or []}


def paragraph(inlines: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    return {"nodeType": "paragraph", "data": {}, "content": inlines or []}


def heading(level: int, inlines: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    lvl = max(1, min(6, int(level or 1)))
    return {"nodeType": f"heading-{lvl}", "data": {}, "content": inlines or []}


def blockquote(paragraphs: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"nodeType": "blockquote", "data": {}, "content": paragraphs}


def hr() -> Dict[str, Any]:
    return {"nodeType": "hr", "data": {}, "content": []}


def code_block(text: str) -> Dict[str, Any]:
    # Contentful has no code block node; a paragraph with a code mark renders closest.
    return paragraph([text_node(text, [mark("code")])])


def list_container(ordered: bool, items: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "nodeType": "ordered-list" if ordered else "unordered-list",
        "data": {},
        "content": items,
    }


def list_item(blocks: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"nodeType": "list-item", "data": {}, "content": blocks}


def text_node(value: str, marks: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    return {"nodeType": "text", "value": value or "", "marks": marks or [], "data": {}}


def mark(mark_type: str) -> Dict[str, Any]:
    return {"type": mark_type}


def hyperlink(uri: str, texts: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"nodeType": "hyperlink", "data": {"uri": uri}, "content": texts}


def table(rows: List[List[str]], header_rows: int = 0) -> Dict[str, Any]:
    """
    TABLE node built from plain cell texts.  The first ``header_rows`` rows
    use header cells.
    """
    row_nodes: List[Dict[str, Any]] = []
    for index, cells in enumerate(rows):
        cell_type = "table-header-cell" if index < header_rows else "table-cell"
        row_nodes.append({
            "nodeType": "table-row",
            "data": {},
            "content": [
                {"nodeType": cell_type, "data": {}, "content": [paragraph([text_node(text)])]}
                for text in cells
            ],
        })
    return {"nodeType": "table", "data": {}, "content": row_nodes}


# --- Minimal validator/normalizer ---

_INLINE_TYPES = {"text", "hyperlink"}
_TEXT_CONTAINERS = {"paragraph", "heading-1", "heading-2", "heading-3", "heading-4", "heading-5", "heading-6"}


def validate_rich_text(doc: Dict[str, Any]) -> Dict[str, Any]:
    """
    Ensure the document follows basic Contentful expectations.
    - Root is a ``document`` with a ``content`` list.
    - Inline nodes never sit directly in the document; stray ones are
      wrapped in a paragraph.
    - Text containers are never empty (the API rejects them).
    """
    if not isinstance(doc, dict) or doc.get("nodeType") != "document":
        doc = document([])

    fixed: List[Dict[str, Any]] = []
    pending: List[Dict[str, Any]] = []

    def flush() -> None:
        if pending:
            fixed.append(paragraph(list(pending)))
            pending.clear()

    for node in doc.get("content") or []:
        if not isinstance(node, dict):
            continue
        if node.get("nodeType") in _INLINE_TYPES:
            pending.append(node)
            continue
        flush()
        fixed.append(node)
    flush()

    def ensure_text(node: Dict[str, Any]) -> None:
        if node.get("nodeType") in _TEXT_CONTAINERS and not node.get("content"):
            node["content"] = [text_node("")]
        for child in node.get("content") or []:
            if isinstance(child, dict):
                ensure_text(child)

    for node in fixed:
        ensure_text(node)

    return document(fixed)
