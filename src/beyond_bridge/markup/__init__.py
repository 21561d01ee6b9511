"""
Markup feature extraction.

Class pages are parsed with BeautifulSoup, flattened into Node records and
walked section by section to recover leveled features.
"""

from .features import parse_features, parse_progression
from .nodes import Node, collect_until, flatten, stop_at_heading

__all__ = [
    "parse_features",
    "parse_progression",
    "Node",
    "collect_until",
    "flatten",
    "stop_at_heading",
]
