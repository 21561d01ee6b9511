"""
Feature extraction from class pages.

A class page carries a progression table whose rows list, per level, links
to feature sections further down the page (``<a href="#ExtraAttack">``).
Each linked section becomes a Feature with its level and description.
"""

from __future__ import annotations

import logging
import re
from urllib.parse import unquote

from bs4 import BeautifulSoup, Tag

from ..models import PLACEHOLDER_DESCRIPTION, Feature, ProgressionRow
from .nodes import Node, collapse, collect_until, flatten, owner_index, stop_at_heading, stop_at_sub_option

logger = logging.getLogger("beyond-bridge")

LEADING_INT = re.compile(r"\s*(\d+)")

# Headings at this rank or above can introduce a choice of sub-options
SECTION_RANK = 3


def _soup(document: str | BeautifulSoup | Tag) -> BeautifulSoup | Tag:
    if isinstance(document, (BeautifulSoup, Tag)):
        return document
    return BeautifulSoup(document or "", "html.parser")


def _body_rows(table: Tag) -> list[Tag]:
    rows = table.select("tbody tr")
    if not rows:
        rows = table.find_all("tr")
    return [row for row in rows if row.find("td")]


def parse_level(text: str, default: int = 1) -> int:
    """Leading integer of a level cell ("5th" -> 5), else ``default``."""
    match = LEADING_INT.match(text or "")
    return int(match.group(1)) if match else default


def introduces_sub_choice(nodes: list[Node], start: int) -> bool:
    """True when a section heading is followed by two or more sub-headings in its section."""
    rank = nodes[start].rank
    if rank is None or rank > SECTION_RANK:
        return False
    section = collect_until(nodes, start, stop_at_heading(rank))
    return sum(1 for node in section if node.is_heading) >= 2


def section_description(nodes: list[Node], start: int) -> str:
    """Serialized content of the section that starts at ``nodes[start]``."""
    node = nodes[start]
    if introduces_sub_choice(nodes, start):
        parts = [n for n in collect_until(nodes, start, stop_at_sub_option) if n.is_block]
    elif node.is_heading:
        parts = [
            n for n in collect_until(nodes, start, stop_at_heading(node.rank))
            if n.is_block or n.is_heading
        ]
    else:
        parts = [node, *(n for n in collect_until(nodes, start, stop_at_heading(6)) if n.is_block)]
    return "".join(n.html for n in parts)


def parse_features(document: str | BeautifulSoup | Tag) -> list[Feature]:
    """
    Extract leveled features from a class page.

    Args:
        document: HTML string or parsed tree containing the progression table.

    Returns:
        Features in table order, unique per (name, requiredLevel).
    """
    soup = _soup(document)
    table = soup.find("table")
    if table is None:
        logger.warning("No feature table found in markup, no features extracted")
        return []

    nodes = flatten(soup)
    positions: dict[str, int] = {}
    for i, node in enumerate(nodes):
        if node.id and node.id not in positions:
            positions[node.id] = i

    features: list[Feature] = []
    seen: set[tuple[str, int]] = set()

    for row in _body_rows(table):
        cells = row.find_all(["td", "th"])
        level = parse_level(cells[0].get_text())
        for link in cells[-1].find_all("a", href=True):
            href = link["href"]
            if not href.startswith("#"):
                continue
            name = collapse(link.get_text(" "))
            if not name or (name, level) in seen:
                continue
            seen.add((name, level))

            fragment = unquote(href[1:])
            description = ""
            if fragment in positions:
                description = section_description(nodes, owner_index(nodes, positions[fragment]))
            if not description:
                logger.debug(f"No description found for feature '{name}' (#{fragment})")
                description = PLACEHOLDER_DESCRIPTION.format(name=name)

            features.append(Feature(name=name, description=description, required_level=level))

    if not features:
        logger.warning("Feature table contained no local feature links")
    return features


def parse_progression(document: str | BeautifulSoup | Tag) -> list[ProgressionRow]:
    """Read the progression table as ``{level, columns}`` rows keyed by header text."""
    soup = _soup(document)
    table = soup.find("table")
    if table is None:
        logger.warning("No progression table found in markup")
        return []

    header_row = table.find("thead") or table.find("tr")
    header_cells = header_row.find_all("th") if header_row else []
    headers = [collapse(cell.get_text(" ")) for cell in header_cells]

    rows: list[ProgressionRow] = []
    for row in _body_rows(table):
        cells = row.find_all(["td", "th"])
        columns = {}
        for i, cell in enumerate(cells[1:], start=1):
            key = headers[i] if i < len(headers) and headers[i] else f"column{i}"
            columns[key] = collapse(cell.get_text(" "))
        rows.append(ProgressionRow(level=parse_level(cells[0].get_text(), len(rows) + 1), columns=columns))
    return rows


__all__ = [
    "introduces_sub_choice",
    "parse_features",
    "parse_level",
    "parse_progression",
    "section_description",
]
