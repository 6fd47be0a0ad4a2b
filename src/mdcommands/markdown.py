"""Parse Markdown into a node tree and serialize it back.

Parsing goes through markdown-it-py (CommonMark plus GFM tables and
strikethrough) and converts its syntax tree into mdast-shaped nodes.
Serialization is a custom block/inline serializer that escapes Markdown
punctuation in text so a parsed tree survives a serialize/parse round trip.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Any, Literal

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode

from mdcommands.id_assigner import generate_unique_id
from mdcommands.schemas import MarkdownNode, NodeType

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

_MD = MarkdownIt("commonmark").enable(["table", "strikethrough"])

_ALIGN_RE = re.compile(r"text-align:\s*(left|right|center)")
_INLINE_ESCAPE_RE = re.compile(r"([\\`*_\[\]<>~])")
_ENTITY_RE = re.compile(r"&(?=#?[A-Za-z0-9]+;)")
_LINE_START_RE = re.compile(r"^(#|[-+=]|\d+(?=[.)]))")
_BACKTICK_RUN_RE = re.compile(r"`+")
_TILDE_RUN_RE = re.compile(r"~+")


def parse_markdown(text: str) -> MarkdownNode:
    """Parse Markdown source into a tree rooted at a ``root`` node.

    The returned nodes carry no ids yet; run ``assign_node_ids`` on the result.
    """
    root = SyntaxTreeNode(_MD.parse(text))
    return MarkdownNode(type=NodeType.ROOT.value, children=_convert_blocks(root.children))


def create_heading(depth: int, text: str) -> MarkdownNode:
    """Create a heading node holding a single text run."""
    if not 1 <= depth <= 6:
        raise ValueError(f"Invalid heading depth {depth}: must be between 1 and 6")
    return MarkdownNode(type=NodeType.HEADING.value, depth=depth, children=[_text(text)])


def create_paragraph(text: str) -> MarkdownNode:
    """Create a paragraph node holding a single text run."""
    return MarkdownNode(type=NodeType.PARAGRAPH.value, children=[_text(text)])


def insert_heading(tree: MarkdownNode, heading: MarkdownNode, position: int) -> None:
    """Insert ``heading`` among the top-level children of ``tree``.

    Nodes of ``heading`` without an id get a fresh one so the tree stays
    addressable by later commands. A position past the end appends.

    Raises:
        ValueError: If ``heading`` is not a heading, ``position`` is negative
            or ``tree`` cannot hold children.
    """
    if heading.type != NodeType.HEADING.value:
        raise ValueError(f"Expected a heading node, got {heading.type!r}")
    if position < 0:
        raise ValueError(f"Invalid position {position}: must be zero or greater")
    if tree.children is None:
        raise ValueError(f"Node {tree.id or tree.type} has no children; cannot insert a heading")

    _fill_missing_ids(heading)
    tree.children.insert(position, heading)
    logger.info("Inserted heading %s at position %d", heading.id, position)


def add_timestamp(
    tree: MarkdownNode,
    position: Literal["start", "end"] = "start",
    *,
    now: datetime | None = None,
) -> MarkdownNode:
    """Add a ``Last updated on ...`` paragraph at the start or end of ``tree``.

    Returns:
        The new paragraph node, whose nodes carry fresh ids.
    """
    if position not in ("start", "end"):
        raise ValueError(f"Invalid timestamp position {position!r}: use 'start' or 'end'")

    stamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
    paragraph = create_paragraph(f"Last updated on {stamp}")
    _fill_missing_ids(paragraph)

    if tree.children is None:
        tree.children = []
    if position == "start":
        tree.children.insert(0, paragraph)
    else:
        tree.children.append(paragraph)

    logger.info("Added timestamp node %s at the %s of the tree", paragraph.id, position)
    return paragraph


def _fill_missing_ids(node: MarkdownNode) -> None:
    for descendant in node.walk():
        if descendant.id is None:
            descendant.id = generate_unique_id()


def _text(value: str) -> MarkdownNode:
    return MarkdownNode(type=NodeType.TEXT.value, value=value)


def _node(node_type: str, **fields: Any) -> MarkdownNode:
    return MarkdownNode(type=node_type, **{key: value for key, value in fields.items() if value is not None})


def _convert_blocks(nodes: list[SyntaxTreeNode]) -> list[MarkdownNode]:
    blocks: list[MarkdownNode] = []
    for node in nodes:
        blocks.extend(_convert_block(node))
    return blocks


def _convert_block(node: SyntaxTreeNode) -> list[MarkdownNode]:
    kind = node.type

    if kind == "heading":
        return [_node("heading", depth=int(node.tag[1]), children=_convert_inline(_inline_tokens(node)))]

    if kind == "paragraph":
        return [_node("paragraph", children=_convert_inline(_inline_tokens(node)))]

    if kind in {"fence", "code_block"}:
        lang, _, meta = (node.info or "").strip().partition(" ")
        return [_node("code", value=_strip_newline(node.content), lang=lang or None, meta=meta.strip() or None)]

    if kind == "html_block":
        return [_node("html", value=_strip_newline(node.content))]

    if kind == "hr":
        return [_node("thematicBreak")]

    if kind == "blockquote":
        return [_node("blockquote", children=_convert_blocks(node.children))]

    if kind in {"bullet_list", "ordered_list"}:
        return [_convert_list(node)]

    if kind == "list_item":
        return [_node("listItem", children=_convert_blocks(node.children))]

    if kind == "table":
        return [_convert_table(node)]

    if node.children:
        return [_node(kind, children=_convert_blocks(node.children))]
    return [_node(kind, value=node.content or None)]


def _convert_list(node: SyntaxTreeNode) -> MarkdownNode:
    ordered = node.type == "ordered_list"
    paragraphs = [child for item in node.children for child in item.children if child.type == "paragraph"]
    tight = all(paragraph.hidden for paragraph in paragraphs)
    start = int(node.attrs.get("start", 1)) if ordered else None
    return _node(
        "list",
        ordered=ordered,
        start=start,
        spread=not tight,
        children=_convert_blocks(node.children),
    )


def _convert_table(node: SyntaxTreeNode) -> MarkdownNode:
    rows: list[MarkdownNode] = []
    align: list[str | None] = []
    for section in node.children:
        for row in section.children:
            if not rows:
                align = [_cell_align(cell) for cell in row.children]
            cells = [_node("tableCell", children=_convert_inline(_inline_tokens(cell))) for cell in row.children]
            rows.append(_node("tableRow", children=cells))
    return _node("table", align=align, children=rows)


def _cell_align(cell: SyntaxTreeNode) -> str | None:
    match = _ALIGN_RE.search(str(cell.attrs.get("style", "")))
    return match.group(1) if match else None


def _inline_tokens(node: SyntaxTreeNode) -> list[SyntaxTreeNode]:
    tokens: list[SyntaxTreeNode] = []
    for child in node.children:
        if child.type == "inline":
            tokens.extend(child.children)
    return tokens


def _convert_inline(nodes: list[SyntaxTreeNode]) -> list[MarkdownNode]:
    result: list[MarkdownNode] = []
    for node in nodes:
        kind = node.type
        if kind in {"text", "text_special"}:
            _append_text(result, node.content)
        elif kind == "softbreak":
            _append_text(result, "\n")
        elif kind == "hardbreak":
            result.append(_node("break"))
        elif kind == "code_inline":
            result.append(_node("inlineCode", value=node.content))
        elif kind == "em":
            result.append(_node("emphasis", children=_convert_inline(node.children)))
        elif kind == "strong":
            result.append(_node("strong", children=_convert_inline(node.children)))
        elif kind == "s":
            result.append(_node("delete", children=_convert_inline(node.children)))
        elif kind == "link":
            result.append(
                _node(
                    "link",
                    url=str(node.attrs.get("href", "")),
                    title=node.attrs.get("title"),
                    children=_convert_inline(node.children),
                )
            )
        elif kind == "image":
            result.append(
                _node(
                    "image",
                    url=str(node.attrs.get("src", "")),
                    title=node.attrs.get("title"),
                    alt=_plain_text(node.children),
                )
            )
        elif kind == "html_inline":
            result.append(_node("html", value=node.content))
        elif node.content:
            _append_text(result, node.content)
    return result


def _append_text(result: list[MarkdownNode], value: str) -> None:
    if result and result[-1].type == NodeType.TEXT.value:
        result[-1].value = (result[-1].value or "") + value
    else:
        result.append(_text(value))


def _plain_text(nodes: list[SyntaxTreeNode]) -> str:
    parts: list[str] = []
    for node in nodes:
        if node.type in {"softbreak", "hardbreak"}:
            parts.append(" ")
        elif node.children:
            parts.append(_plain_text(node.children))
        else:
            parts.append(node.content)
    return "".join(parts)


def _strip_newline(value: str) -> str:
    return value[:-1] if value.endswith("\n") else value


# -- serialization -----------------------------------------------------------


def serialize_markdown(tree: MarkdownNode) -> str:
    """Render a tree back to Markdown source."""
    if tree.type == NodeType.ROOT.value:
        body = "\n\n".join(_serialize_blocks(tree.children or []))
    else:
        body = "\n\n".join(_serialize_block(tree, previous=None))
    return f"{body}\n" if body else ""


def _serialize_blocks(nodes: list[MarkdownNode]) -> list[str]:
    blocks: list[str] = []
    previous: MarkdownNode | None = None
    for node in nodes:
        blocks.extend(_serialize_block(node, previous=previous))
        previous = node
    return blocks


def _serialize_block(node: MarkdownNode, *, previous: MarkdownNode | None) -> list[str]:
    kind = node.type

    if kind == "paragraph":
        return [_serialize_inline(node.children or [])]

    if kind == "heading":
        depth = min(max(node.depth or 1, 1), 6)
        content = _serialize_inline(node.children or []).replace("\n", " ")
        return [f"{'#' * depth} {content}".rstrip()]

    if kind == "thematicBreak":
        return ["***"]

    if kind == "code":
        return [_serialize_code(node)]

    if kind == "html":
        return [node.value or ""]

    if kind == "blockquote":
        inner = "\n\n".join(_serialize_blocks(node.children or []))
        return ["\n".join(f"> {line}" if line else ">" for line in inner.split("\n"))]

    if kind == "list":
        return [_serialize_list(node, previous=previous)]

    if kind == "listItem":
        return [_serialize_list_item(node, "-", spread=False)]

    if kind == "table":
        return [_serialize_table(node)]

    if kind in _INLINE_KINDS:
        return [_serialize_inline([node])]

    if node.children:
        return _serialize_blocks(node.children)
    return [node.value] if node.value else []


def _serialize_code(node: MarkdownNode) -> str:
    value = node.value or ""
    info = " ".join(part for part in (node.attr("lang"), node.attr("meta")) if part)
    fence_char = "~" if "`" in info else "`"
    run_re = _TILDE_RUN_RE if fence_char == "~" else _BACKTICK_RUN_RE
    longest = max((len(run) for run in run_re.findall(value)), default=0)
    fence = fence_char * max(3, longest + 1)
    if value:
        return f"{fence}{info}\n{value}\n{fence}"
    return f"{fence}{info}\n{fence}"


def _serialize_list(node: MarkdownNode, *, previous: MarkdownNode | None) -> str:
    ordered = bool(node.attr("ordered"))
    spread = bool(node.attr("spread"))
    # Adjacent lists with the same marker would merge into one list.
    alternate = previous is not None and previous.type == "list" and bool(previous.attr("ordered")) == ordered
    start = node.attr("start")
    start = 1 if start is None else int(start)

    items: list[str] = []
    for offset, item in enumerate(node.children or []):
        if ordered:
            marker = f"{start + offset}{')' if alternate else '.'}"
        else:
            marker = "*" if alternate else "-"
        items.append(_serialize_list_item(item, marker, spread=spread))
    return ("\n\n" if spread else "\n").join(items)


def _serialize_list_item(item: MarkdownNode, marker: str, *, spread: bool) -> str:
    children = item.children or []
    if item.type != NodeType.LIST_ITEM.value:
        children = [item]

    parts: list[str] = []
    previous: MarkdownNode | None = None
    for child in children:
        rendered = "\n\n".join(_serialize_block(child, previous=previous))
        if parts:
            loose = spread or (previous is not None and previous.type == child.type == "paragraph")
            parts.append("\n\n" if loose else "\n")
        parts.append(rendered)
        previous = child
    content = "".join(parts)

    if not content:
        return marker
    indent = " " * (len(marker) + 1)
    lines = content.split("\n")
    rendered_lines = [f"{marker} {lines[0]}"]
    rendered_lines.extend(f"{indent}{line}" if line else "" for line in lines[1:])
    return "\n".join(rendered_lines)


def _serialize_table(node: MarkdownNode) -> str:
    rows = node.children or []
    if not rows:
        return ""
    rendered_rows = [[_serialize_cell(cell) for cell in row.children or []] for row in rows]
    columns = max(len(row) for row in rendered_rows) or 1
    align = list(node.attr("align") or [])
    align.extend([None] * (columns - len(align)))

    lines = [_table_line(rendered_rows[0], columns)]
    lines.append(_table_line([_ALIGN_DELIMITERS.get(value, "---") for value in align[:columns]], columns))
    lines.extend(_table_line(row, columns) for row in rendered_rows[1:])
    return "\n".join(lines)


_ALIGN_DELIMITERS = {"left": ":---", "center": ":---:", "right": "---:"}


def _table_line(cells: list[str], columns: int) -> str:
    padded = cells + [""] * (columns - len(cells))
    return "| " + " | ".join(padded) + " |"


def _serialize_cell(cell: MarkdownNode) -> str:
    content = _serialize_inline(cell.children or [], in_table=True)
    return content.replace("\n", " ")


_INLINE_KINDS = frozenset(
    {"text", "emphasis", "strong", "delete", "inlineCode", "break", "link", "image"}
)


def _serialize_inline(nodes: list[MarkdownNode], *, in_table: bool = False, at_start: bool = True) -> str:
    parts: list[str] = []
    for index, node in enumerate(nodes):
        part = _serialize_inline_node(node, in_table=in_table, at_start=at_start and index == 0)
        # A literal "!" right before a link would turn it into an image.
        if part.endswith("!") and index + 1 < len(nodes) and nodes[index + 1].type == "link":
            part = part[:-1] + "\\!"
        parts.append(part)
    return "".join(parts)


def _serialize_inline_node(node: MarkdownNode, *, in_table: bool, at_start: bool) -> str:
    kind = node.type

    if kind == "text":
        return _escape_text(node.value or "", in_table=in_table, at_start=at_start)

    if kind == "emphasis":
        return f"*{_serialize_inline(node.children or [], in_table=in_table, at_start=False)}*"

    if kind == "strong":
        return f"**{_serialize_inline(node.children or [], in_table=in_table, at_start=False)}**"

    if kind == "delete":
        return f"~~{_serialize_inline(node.children or [], in_table=in_table, at_start=False)}~~"

    if kind == "inlineCode":
        return _serialize_inline_code(node.value or "")

    if kind == "break":
        return "\\\n"

    if kind == "link":
        label = _serialize_inline(node.children or [], in_table=in_table, at_start=False)
        return f"[{label}]({_destination(node)})"

    if kind == "image":
        alt = _escape_text(node.attr("alt") or "", in_table=in_table, at_start=False)
        return f"![{alt}]({_destination(node)})"

    if kind == "html":
        return node.value or ""

    if node.children:
        return _serialize_inline(node.children, in_table=in_table, at_start=at_start)
    return _escape_text(node.value or "", in_table=in_table, at_start=at_start)


def _serialize_inline_code(value: str) -> str:
    longest = max((len(run) for run in _BACKTICK_RUN_RE.findall(value)), default=0)
    fence = "`" * (longest + 1)
    padded = value.startswith("`") or value.endswith("`")
    if value.startswith(" ") and value.endswith(" ") and value.strip():
        padded = True
    return f"{fence} {value} {fence}" if padded else f"{fence}{value}{fence}"


def _destination(node: MarkdownNode) -> str:
    url = str(node.attr("url") or "")
    if not url or re.search(r"[\s()<>]", url):
        url = "<" + url.replace("<", "%3C").replace(">", "%3E") + ">"
    title = node.attr("title")
    if title:
        escaped = str(title).replace("\\", "\\\\").replace('"', '\\"')
        return f'{url} "{escaped}"'
    return url


def _escape_text(value: str, *, in_table: bool, at_start: bool) -> str:
    escaped = _INLINE_ESCAPE_RE.sub(r"\\\1", value)
    escaped = _ENTITY_RE.sub(r"\\&", escaped)
    if in_table:
        escaped = escaped.replace("|", "\\|")

    lines = escaped.split("\n")
    for index, line in enumerate(lines):
        if index == 0 and not at_start:
            continue
        lines[index] = _escape_line_start(line)
    return "\n".join(lines)


def _escape_line_start(line: str) -> str:
    match = _LINE_START_RE.match(line)
    if match is None:
        return line
    marker = match.group(1)
    if marker.isdigit():
        return f"{marker}\\{line[len(marker):]}"
    return f"\\{line}"
