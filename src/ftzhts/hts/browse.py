"""Hierarchical browsing of the chapter -> tariff line tree."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from ftzhts.hts.models import BROWSE_LEVELS, BrowseNode
from ftzhts.hts.reference_data import ReferenceData

DEFAULT_BROWSE_LIMIT = 50


def _matches(node: BrowseNode, field_name: str, value: str) -> bool:
    """A filter value matches the node's own field or the node's code."""
    return getattr(node, field_name) == value or node.code == value


def browse_hts(
    data: ReferenceData,
    offset: int = 0,
    limit: int = DEFAULT_BROWSE_LIMIT,
    include_headers: bool = True,
    level: Optional[str] = None,
    chapter: Optional[str] = None,
    heading: Optional[str] = None,
    subheading: Optional[str] = None,
) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
    """Filter, sort and paginate browse nodes.

    A non-positive ``limit`` disables pagination. Negative offsets are
    treated as zero.
    """

    offset = max(0, offset)
    nodes = list(data.browse_nodes)

    for field_name, value in (
        ("level", level),
        ("chapter", chapter),
        ("heading", heading),
        ("subheading", subheading),
    ):
        if value:
            nodes = [node for node in nodes if _matches(node, field_name, value)]

    if not include_headers:
        nodes = [node for node in nodes if node.type == "tariff_line"]

    nodes.sort(key=lambda node: node.sort_code)

    total = len(nodes)
    if limit > 0:
        nodes = nodes[offset:offset + limit]

    meta = {
        "total": total,
        "offset": offset,
        "limit": limit,
        "returned": len(nodes),
        "has_more": offset + len(nodes) < total,
        "filters_applied": {
            "level": level,
            "chapter": chapter,
            "heading": heading,
            "subheading": subheading,
            "include_headers": include_headers,
        },
        "available_levels": list(BROWSE_LEVELS),
        "available_chapters": sorted({n.chapter for n in data.browse_nodes if n.chapter}),
    }
    return [node.to_dict() for node in nodes], meta
