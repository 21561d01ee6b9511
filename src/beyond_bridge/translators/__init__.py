"""
Entity translators for D&D Beyond records.

Each translator is a pure function from a provider record to a target
schema entity:
- translate_spell: spell definitions and character spells
- translate_item: item definitions and inventory entries
- translate_class: class definitions, optionally merged with class page markup
- translate_monster: monster-service records
"""

from .base import AuthFailure, MissingDefinition, TranslationError
from . import codes
from .spell import translate_spell
from .item import translate_item
from .character_class import translate_class
from .monster import translate_monster

__all__ = [
    "codes",
    "translate_spell",
    "translate_item",
    "translate_class",
    "translate_monster",
    "TranslationError",
    "MissingDefinition",
    "AuthFailure",
]
