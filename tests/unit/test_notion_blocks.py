from ragops.knowledge.ingestion.blocks import extract_title, render_blocks, rich_text_to_markdown


def _text(content, **annotations):
    return {"plain_text": content, "annotations": annotations}


def _block(block_type, content, **extra):
    body = {"rich_text": [_text(content)]}
    body.update(extra.pop("body", {}))
    return {"object": "block", "type": block_type, block_type: body, **extra}


def test_rich_text_annotations():
    rendered = rich_text_to_markdown(
        [
            _text("bold", bold=True),
            _text(" and "),
            {"plain_text": "link", "href": "https://example.com"},
            _text(" "),
            _text("code", code=True),
        ]
    )
    assert rendered == "**bold** and [link](https://example.com) `code`"


def test_block_types_render_as_markdown():
    blocks = [
        _block("heading_1", "Title"),
        _block("heading_2", "Section"),
        _block("paragraph", "Body text"),
        _block("bulleted_list_item", "Bullet"),
        _block("numbered_list_item", "Step"),
        _block("to_do", "Done", body={"checked": True}),
        _block("to_do", "Open"),
        _block("quote", "Quoted"),
        _block("code", "print('hi')"),
        {"object": "block", "type": "image", "image": {}},
    ]

    assert render_blocks(blocks).split("\n\n") == [
        "# Title",
        "## Section",
        "Body text",
        "- Bullet",
        "1. Step",
        "- [x] Done",
        "- [ ] Open",
        "> Quoted",
        "```\nprint('hi')\n```",
    ]


def test_children_are_indented():
    parent = _block("bulleted_list_item", "Parent", has_children=True)
    parent["children"] = [_block("bulleted_list_item", "Child")]

    assert render_blocks([parent]) == "- Parent\n\n  - Child"


def test_extract_title():
    page = {"properties": {"Page": {"type": "title", "title": [{"plain_text": "Runbook"}]}}}
    assert extract_title(page) == "Runbook"
    assert extract_title({"properties": {}}) == "Untitled Notion Page"
