"""
Dice formula extraction.

Explicit dice fields on a source definition always win; free-text patterns
are only scanned when no explicit dice exist.
"""

from __future__ import annotations

import logging
from typing import Any

from ..models import DamagePart, DamageScaling
from ..translators import codes
from ..translators.common import as_dict, as_int, as_list, as_str
from ..translators.schema import DAMAGE_TEXT_PATTERN, DICE_PATTERN, DICE_WITH_BONUS_PATTERN

logger = logging.getLogger("beyond-bridge")

DEFAULT_HEALING_FORMULA = "1d8"


def dice_formula(count: Any, value: Any, fixed: Any = 0) -> str:
    """Render ``count``d``value`` [+ fixed]; a bare fixed value renders as a number."""
    count = as_int(count, 0)
    value = as_int(value, 0)
    fixed = as_int(fixed, 0)
    if count and value:
        formula = f"{count}d{value}"
        if fixed > 0:
            formula += f" + {fixed}"
        return formula
    if fixed > 0:
        return str(fixed)
    return ""


def dice_from_block(block: Any) -> str:
    """Formula from a provider dice block ({diceCount, diceValue, fixedValue, diceString})."""
    block = as_dict(block)
    formula = dice_formula(block.get("diceCount"), block.get("diceValue"), block.get("fixedValue"))
    return formula or as_str(block.get("diceString")).strip()


def _damage_types(block: dict) -> set[str]:
    if block.get("damageTypeId") is not None:
        return {codes.damage_type(block.get("damageTypeId"))}
    named = codes.damage_type_name(block.get("damageType"))
    return {named} if named else set()


def scaling_formula(scale_dice: Any, higher_level: Any) -> str:
    """
    Find the extra dice added per higher level.

    Args:
        scale_dice: Explicit higher-level dice blocks (``higherLevelDice``/``scaleType``).
        higher_level: Free-text higher-level description.

    Returns:
        Dice formula such as ``1d6``, or an empty string.
    """
    for block in as_list(scale_dice):
        block = as_dict(block)
        count, value = as_int(block.get("diceCount"), 0), as_int(block.get("diceValue"), 0)
        if count and value:
            return f"{count}d{value}"

    match = DICE_PATTERN.search(as_str(higher_level))
    return match.group(1) if match else ""


def damage_from_text(description: Any) -> DamagePart | None:
    """First ``<dice> <type> damage`` phrase in the description, if any."""
    match = DAMAGE_TEXT_PATTERN.search(as_str(description))
    if not match:
        return None
    formula = " + ".join(part.strip() for part in match.group(1).split("+"))
    named = codes.damage_type_name(match.group(2))
    logger.debug(f"Damage '{formula}' read from description text")
    return DamagePart(formula=formula, types={named} if named else set())


def damage_parts(damage_dice: Any, description: Any = "", scaling: str = "") -> list[DamagePart]:
    """Build damage parts from explicit dice tuples, else from the description."""
    parts: list[DamagePart] = []
    for block in as_list(damage_dice):
        block = as_dict(block)
        formula = dice_from_block(block)
        if not formula:
            continue
        parts.append(DamagePart(formula=formula, types=_damage_types(block)))

    if not parts:
        from_text = damage_from_text(description)
        if from_text is not None:
            parts.append(from_text)

    if scaling:
        for part in parts:
            part.scaling = DamageScaling(mode="whole", formula=scaling)
    return parts


def healing_formula(healing_dice: Any, description: Any = "") -> str:
    """Healing dice from explicit fields, then the description, then ``1d8``."""
    for block in as_list(healing_dice):
        formula = dice_from_block(block)
        if formula:
            return formula

    match = DICE_WITH_BONUS_PATTERN.search(as_str(description))
    if match:
        return " + ".join(part.strip() for part in match.group(1).split("+"))
    return DEFAULT_HEALING_FORMULA


__all__ = [
    "DEFAULT_HEALING_FORMULA",
    "damage_from_text",
    "damage_parts",
    "dice_formula",
    "dice_from_block",
    "healing_formula",
    "scaling_formula",
]
