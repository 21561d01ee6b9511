"""
Total lookup functions over the provider code tables.

Every function returns a documented default for an unknown or missing code
instead of raising, so a translator never fails on an unmapped value.
Fallbacks are logged at debug level.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from fractions import Fraction
from typing import Any

from .schema import (
    ABILITIES,
    ACTIVATION_TYPES,
    ALIGNMENTS,
    AREA_SHAPES,
    CHALLENGE_RATINGS,
    CONDITIONS,
    CREATURE_TYPES,
    DAMAGE_TYPES,
    DURATION_UNITS,
    EXHAUSTION_CONDITION_ID,
    ITEM_RARITIES,
    MAX_EXHAUSTION_LEVEL,
    MOVEMENTS,
    RANGE_ORIGINS,
    RESET_TYPES,
    SIZES,
    SKILLS,
    SOURCE_BOOKS,
    SPELL_SCHOOLS,
)

logger = logging.getLogger("beyond-bridge")


def lookup(table: Mapping[Any, Any], code: Any) -> Any:
    """``table.get(code)`` that returns None for a list or object where a code is expected."""
    try:
        return table.get(code)
    except TypeError:
        return None


def _fallback(table: str, code: Any, default: Any) -> Any:
    logger.debug(f"Unmapped {table} code {code!r}, using default {default!r}")
    return default


def ability(ability_id: Any, default: str = "str") -> str:
    """Map a provider stat id (1-6) to an ability code."""
    code = lookup(ABILITIES, ability_id)
    return code if code is not None else _fallback("ability", ability_id, default)


def damage_type(damage_type_id: Any) -> str:
    """Map a provider damage type id to a damage type. Defaults to ``force``."""
    code = lookup(DAMAGE_TYPES, damage_type_id)
    return code if code is not None else _fallback("damage type", damage_type_id, "force")


def damage_type_name(name: Any) -> str | None:
    """Normalize a damage type name ("Fire", "fire") to its code, or None."""
    if not isinstance(name, str):
        return None
    normalized = name.strip().lower()
    if normalized in DAMAGE_TYPES.values():
        return normalized
    return None


def condition(condition_id: Any) -> str | None:
    """Map a provider condition id to a condition code, or None if unknown."""
    code = lookup(CONDITIONS, condition_id)
    if code is None:
        logger.debug(f"Unmapped condition code {condition_id!r}")
    return code


def condition_effect(condition_id: Any, level: Any = None) -> str | None:
    """Map a condition to its effect code.

    Exhaustion stacks: a level of 1-6 (clamped) yields ``exhaustion-N``.
    """
    code = condition(condition_id)
    if condition_id == EXHAUSTION_CONDITION_ID and isinstance(level, int) and level > 0:
        return f"exhaustion-{min(level, MAX_EXHAUSTION_LEVEL)}"
    return code


def skill(skill_id: Any) -> str:
    """Map a provider skill id to a skill code. Defaults to ``acr``."""
    entry = lookup(SKILLS, skill_id)
    if entry is None:
        return _fallback("skill", skill_id, "acr")
    return entry[0]


def skill_ability(skill_id: Any) -> str:
    """Return the ability governing a skill. Defaults to ``dex``."""
    entry = lookup(SKILLS, skill_id)
    if entry is None:
        return _fallback("skill ability", skill_id, "dex")
    return entry[1]


def size(size_id: Any) -> str:
    code = lookup(SIZES, size_id)
    return code if code is not None else _fallback("size", size_id, "med")


def alignment(alignment_id: Any) -> str:
    code = lookup(ALIGNMENTS, alignment_id)
    return code if code is not None else _fallback("alignment", alignment_id, "")


def creature_type(type_id: Any) -> str:
    code = lookup(CREATURE_TYPES, type_id)
    return code if code is not None else _fallback("creature type", type_id, "humanoid")


def challenge_rating(cr_id: Any) -> float:
    """Map a challenge rating id to its numeric CR (0, 1/8, 1/4, 1/2, 1..30)."""
    value = lookup(CHALLENGE_RATINGS, cr_id)
    return value if value is not None else _fallback("challenge rating", cr_id, 0)


def challenge_rating_label(cr: float) -> str:
    """Render a numeric CR the way stat blocks print it ("1/8", "5")."""
    return str(Fraction(cr).limit_denominator(8))


def source_book(source_id: Any) -> str:
    code = lookup(SOURCE_BOOKS, source_id)
    return code if code is not None else _fallback("source book", source_id, "")


def spell_school(name: Any) -> str:
    """Map a school display name ("Evocation") to its code. Defaults to ``evo``."""
    code = lookup(SPELL_SCHOOLS, name.strip().lower()) if isinstance(name, str) else None
    return code if code is not None else _fallback("spell school", name, "evo")


def item_rarity(name: Any) -> str:
    code = lookup(ITEM_RARITIES, name.strip().lower()) if isinstance(name, str) else None
    return code if code is not None else _fallback("rarity", name, "common")


def movement(movement_id: Any) -> str:
    code = lookup(MOVEMENTS, movement_id)
    return code if code is not None else _fallback("movement", movement_id, "walk")


def activation_type(activation_id: Any) -> str:
    code = lookup(ACTIVATION_TYPES, activation_id)
    return code if code is not None else _fallback("activation", activation_id, "action")


def duration_unit(duration_type: Any) -> str:
    code = lookup(DURATION_UNITS, duration_type)
    return code if code is not None else _fallback("duration", duration_type, "inst")


def range_units(origin: Any) -> str:
    code = lookup(RANGE_ORIGINS, origin)
    return code if code is not None else _fallback("range origin", origin, "ft")


def area_shape(aoe_type: Any) -> str:
    code = lookup(AREA_SHAPES, aoe_type)
    return code if code is not None else _fallback("area shape", aoe_type, "creature")


def reset_type(reset_id: Any) -> str:
    code = lookup(RESET_TYPES, reset_id)
    return code if code is not None else _fallback("reset type", reset_id, "")


__all__ = [
    "ability",
    "activation_type",
    "alignment",
    "area_shape",
    "challenge_rating",
    "challenge_rating_label",
    "condition",
    "condition_effect",
    "creature_type",
    "damage_type",
    "damage_type_name",
    "duration_unit",
    "item_rarity",
    "lookup",
    "movement",
    "range_units",
    "reset_type",
    "size",
    "skill",
    "skill_ability",
    "source_book",
    "spell_school",
]
