"""
Spell translation.

Accepts either a character-spell wrapper (``{"definition": {...}, "prepared": ...}``)
or a bare spell definition as served by the provider's spell endpoints.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from ..activities.dice import damage_parts, healing_formula, scaling_formula
from ..models import DamageScaling, SpellEntity
from . import codes
from .common import (
    activation,
    as_dict,
    as_int,
    as_list,
    as_str,
    assemble_description,
    component_flags,
    description_or_placeholder,
    duration,
    gp_cost,
    optional,
    provenance,
    range_,
    require,
    require_id,
    source_label,
    target,
)

logger = logging.getLogger("beyond-bridge")

SCHOOL_ICONS = {
    "abj": "icons/magic/defensive/shield-barrier-blue.webp",
    "con": "icons/magic/symbols/elements-air-earth-fire-water.webp",
    "div": "icons/magic/perception/eye-ringed-glow-yellow.webp",
    "enc": "icons/magic/control/hypnosis-mesmerism-swirl.webp",
    "evo": "icons/magic/lightning/bolt-strike-blue.webp",
    "ill": "icons/magic/perception/silhouette-stealth-shadow.webp",
    "nec": "icons/magic/death/skull-horned-goat-pentagram-red.webp",
    "trs": "icons/magic/symbols/question-stone-yellow.webp",
}


def _unwrap(record: dict) -> tuple[dict, dict]:
    """Split a record into (wrapper, definition)."""
    definition = as_dict(record.get("definition"))
    if definition:
        return record, definition
    return {}, record


def _tags(definition: dict, flags: set[str]) -> list[str]:
    tags = []
    if "ritual" in flags:
        tags.append("Ritual")
    if "concentration" in flags:
        tags.append("Concentration")
    if "material" in flags:
        tags.append("Material Component")
    if as_str(definition.get("componentsDescription")):
        tags.append("Focus")
    return tags


def _attack_code(definition: dict) -> int:
    attack_type = as_int(definition.get("attackType"), 0)
    return attack_type if attack_type in (1, 2, 3, 4) else 0


def _saves(definition: dict) -> bool:
    return bool(definition.get("requiresSavingThrow") or definition.get("saveDcAbilityId"))


def _heals(definition: dict) -> bool:
    return bool(definition.get("healing") or as_list(definition.get("healingDice")))


def _action_type(definition: dict) -> str:
    """The primary action type. Secondary effects stay on ``attackType``, ``save`` and ``formula``."""
    attack_type = _attack_code(definition)
    if attack_type:
        return ("mwak", "rwak", "msak", "rsak")[attack_type - 1]
    if _saves(definition):
        return "save"
    if _heals(definition):
        return "heal"
    return "other"


def _uses(wrapper: dict) -> dict[str, Any]:
    limited = as_dict(wrapper.get("limitedUse"))
    max_uses = as_int(limited.get("maxUses"), None)
    return {
        "value": max_uses,
        "max": str(max_uses) if max_uses is not None else "",
        "recovery": codes.reset_type(limited.get("resetType")) if limited else "",
    }


def translate_spell(
    record: dict,
    *,
    import_method: str = "api",
    preparation_mode: str = "prepared",
    now: datetime | None = None,
) -> SpellEntity:
    """
    Translate a provider spell into a spell document.

    Args:
        record: Character spell wrapper or bare spell definition.
        import_method: Recorded in the provenance block.
        preparation_mode: Preparation mode for the spell (prepared, always, pact, ...).
        now: Import timestamp; defaults to the current UTC time.

    Returns:
        SpellEntity

    Raises:
        MissingDefinition: If the definition has no id or name.
    """
    wrapper, definition = _unwrap(record)
    source_id = require_id(definition, "spell")
    name = str(require(definition, "name", "spell")).strip()

    level = as_int(optional(definition, "level", 0, "spell"), 0)
    school = codes.spell_school(definition.get("school"))
    flags = component_flags(definition)
    higher_level = as_str(definition.get("higherLevelDescription"))

    description = assemble_description(
        definition.get("description"),
        higher_level,
        tags=_tags(definition, flags),
    )

    scaling = scaling_formula(
        as_list(definition.get("higherLevelDice")) or as_list(definition.get("scaleType")),
        higher_level,
    )
    damage_dice = as_list(definition.get("damageDice")) or as_list(definition.get("dice"))
    parts = damage_parts(damage_dice, definition.get("description"), scaling)
    action_type = _action_type(definition)
    save_id = definition.get("saveDcAbilityId")
    materials = as_str(definition.get("componentsDescription"))
    range_block = as_dict(definition.get("range"))

    system = {
        "description": {"value": description_or_placeholder(description, name), "chat": ""},
        "source": source_label(definition),
        "level": level,
        "school": school,
        "properties": sorted(flags),
        "materials": {
            "value": materials,
            "consumed": "consume" in materials.lower(),
            "cost": gp_cost(materials),
            "supply": 0,
        },
        "preparation": {
            "mode": preparation_mode,
            "prepared": bool(wrapper.get("prepared")) or bool(wrapper.get("alwaysPrepared")),
        },
        "activation": activation(definition.get("activation")),
        "range": range_(range_block),
        "target": target(range_block),
        "duration": duration(definition.get("duration"), "concentration" in flags),
        "uses": _uses(wrapper),
        "ability": codes.ability(wrapper["spellCastingAbilityId"]) if wrapper.get("spellCastingAbilityId") else "",
        "actionType": action_type,
        "attackType": _attack_code(definition),
        "damage": {"parts": parts},
        "formula": healing_formula(definition.get("healingDice"), definition.get("description"))
        if _heals(definition) else "",
        "save": {"ability": codes.ability(save_id, default="dex") if _saves(definition) else ""},
        "scaling": DamageScaling(mode="whole" if scaling else "none", formula=scaling),
    }

    logger.debug(f"Translated spell '{name}' (level {level}, {school})")
    return SpellEntity(
        name=name,
        img=SCHOOL_ICONS.get(school, ""),
        system=system,
        flags=provenance(source_id, import_method, now),
    )


__all__ = ["translate_spell"]
