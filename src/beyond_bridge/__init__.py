"""
beyond-bridge - translate D&D Beyond content into dnd5e documents.

Components:
- SessionCache: TTL cache for bearer tokens and provider config
- AuthBroker / ConfigBroker: credential exchange and config lookup
- translators: spell, item, class and monster translators plus code tables
- markup: feature extraction from class pages
- activities: attack/save/heal/utility classification
- BatchOrchestrator: bulk translate-and-upsert with per-item failures
"""

from .cache import SessionCache
from .config import Settings, configure_logging
from .auth import AuthBroker
from .lookup import ConfigBroker
from .translators import (
    AuthFailure,
    MissingDefinition,
    TranslationError,
    translate_class,
    translate_item,
    translate_monster,
    translate_spell,
)
from .markup import parse_features
from .activities import classify, classify_entity
from .batch import BatchOrchestrator, BatchResult, InMemoryCollection, run_authenticated_batch

__version__ = "0.1.0"

__all__ = [
    "SessionCache",
    "Settings",
    "configure_logging",
    "AuthBroker",
    "ConfigBroker",
    "translate_spell",
    "translate_item",
    "translate_class",
    "translate_monster",
    "parse_features",
    "classify",
    "classify_entity",
    "BatchOrchestrator",
    "BatchResult",
    "InMemoryCollection",
    "run_authenticated_batch",
    "TranslationError",
    "MissingDefinition",
    "AuthFailure",
]
