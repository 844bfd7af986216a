"""Render an already-fetched Notion block tree as Markdown-flavoured text.

Blocks are the raw API dictionaries. Nested blocks are expected under a
`children` key, attached by the sync worker before rendering, so nothing here
touches the network.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping

Block = Mapping[str, Any]

INDENT = "  "

PREFIXES: Dict[str, str] = {
    "paragraph": "",
    "toggle": "",
    "heading_1": "# ",
    "heading_2": "## ",
    "heading_3": "### ",
    "bulleted_list_item": "- ",
    "numbered_list_item": "1. ",
    "quote": "> ",
}


def rich_text_to_markdown(rich_text: Iterable[Mapping[str, Any]] | None) -> str:
    if not rich_text:
        return ""

    parts: List[str] = []
    for item in rich_text:
        text = item.get("plain_text") or ""
        annotations = item.get("annotations") or {}
        if annotations.get("bold"):
            text = f"**{text}**"
        if annotations.get("italic"):
            text = f"*{text}*"
        if annotations.get("code"):
            text = f"`{text}`"
        if item.get("href"):
            text = f"[{text}]({item['href']})"
        parts.append(text)
    return "".join(parts)


def render_block(block: Block, depth: int = 0) -> str:
    """Render one block without its children; unsupported types render empty."""

    block_type = block.get("type") or ""
    body = block.get(block_type) or {}
    text = rich_text_to_markdown(body.get("rich_text"))
    indent = INDENT * depth

    if block_type in PREFIXES:
        return f"{indent}{PREFIXES[block_type]}{text}"
    if block_type == "to_do":
        checked = "[x]" if body.get("checked") else "[ ]"
        return f"{indent}- {checked} {text}"
    if block_type == "code":
        return f"{indent}```\n{text}\n{indent}```"
    return ""


def render_blocks(blocks: Iterable[Block], depth: int = 0) -> str:
    """Depth-first rendering; children are indented one level per depth."""

    lines: List[str] = []
    for block in blocks:
        line = render_block(block, depth)
        if line.strip():
            lines.append(line)

        children = block.get("children") or []
        if children:
            nested = render_blocks(children, depth + 1)
            if nested.strip():
                lines.append(nested)

    return "\n\n".join(lines)


def extract_title(page: Mapping[str, Any], default: str = "Untitled Notion Page") -> str:
    properties = page.get("properties") or {}

    title_prop = next(
        (prop for prop in properties.values() if isinstance(prop, Mapping) and prop.get("type") == "title"),
        None,
    )
    if title_prop is None:
        title_prop = properties.get("Name") or properties.get("title")

    if isinstance(title_prop, Mapping) and isinstance(title_prop.get("title"), list):
        title = "".join(item.get("plain_text", "") for item in title_prop["title"])
        if title:
            return title
    return default


__all__ = ["extract_title", "render_block", "render_blocks", "rich_text_to_markdown"]
