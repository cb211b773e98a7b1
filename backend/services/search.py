from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from backend.mappings import COMMAND_PROMPT, LABEL_FALLBACK, NODE_TYPE_LABELS, TYPE_FILTER_ALL
from backend.models.graph import FlowNode
from backend.models.response import SearchResult

logger = logging.getLogger(__name__)


def node_title(node: FlowNode) -> str:
    """Short label for a node: the command for inputs, first line for results."""
    if node.title:
        return node.title
    if node.type == "input":
        return node.content.removeprefix(COMMAND_PROMPT)
    if node.type in ("output", "error"):
        first_line = next(iter(node.content.splitlines()), "")
        return first_line or NODE_TYPE_LABELS[node.type]
    return NODE_TYPE_LABELS.get(node.type, LABEL_FALLBACK)


def format_result_count(count: int, active: bool) -> str:
    if not active:
        return ""
    return f"{count} result{'' if count == 1 else 's'}"


def _coerce_nodes(nodes: Any) -> list[FlowNode]:
    if not isinstance(nodes, (list, tuple)):
        return []

    valid: list[FlowNode] = []
    for item in nodes:
        if isinstance(item, FlowNode):
            valid.append(item)
            continue
        try:
            valid.append(FlowNode.model_validate(item))
        except ValidationError:
            logger.debug("Skipping malformed node in search input: %r", item)
    return valid


def _matches_query(node: FlowNode, needle: str) -> bool:
    return needle in node_title(node).lower() or needle in node.content.lower()


def evaluate_search(nodes: Any, query: str | None, type_filter: str | None = TYPE_FILTER_ALL) -> SearchResult:
    """Filter ``nodes`` by type and case-insensitive substring, keeping order.

    An empty query with the ``all`` filter means no filter is active: the
    result is empty rather than every node. An empty or unusable node
    collection also gives an empty, cleared result. Never raises.
    """
    query = query or ""
    type_filter = type_filter or TYPE_FILTER_ALL
    active = bool(query) or type_filter != TYPE_FILTER_ALL
    if not active:
        return SearchResult()

    candidates = _coerce_nodes(nodes)
    if not candidates:
        # Nothing to search: clear the display instead of reporting "0 results"
        return SearchResult()

    if type_filter != TYPE_FILTER_ALL:
        candidates = [n for n in candidates if n.type == type_filter]

    if query:
        needle = query.lower()
        matches = [n for n in candidates if _matches_query(n, needle)]
    else:
        matches = candidates

    return SearchResult(
        matches=matches,
        count=len(matches),
        active=True,
        label=format_result_count(len(matches), True),
        focus_id=matches[0].id if query and matches else None,
    )
