"""
Monster translation.

Maps a monster-service record (numeric size, type, alignment and challenge
rating ids, stat arrays and stat-block HTML sections) to an NPC actor.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from ..activities.dice import dice_from_block
from ..models import MonsterEntity
from . import codes
from .common import (
    as_dict,
    as_int,
    as_list,
    as_str,
    description_or_placeholder,
    provenance,
    require,
    require_id,
    upscale_image,
)
from .schema import ABILITIES, DAMAGE_ADJUSTMENT_KINDS, SENSES

logger = logging.getLogger("beyond-bridge")

DEFAULT_MONSTER_IMAGE = "icons/svg/mystery-man.svg"

BIOGRAPHY_SECTIONS = (
    ("specialTraitsDescription", "Traits"),
    ("actionsDescription", "Actions"),
    ("bonusActionsDescription", "Bonus Actions"),
    ("reactionsDescription", "Reactions"),
    ("legendaryActionsDescription", "Legendary Actions"),
    ("mythicActionsDescription", "Mythic Actions"),
    ("lairDescription", "Lair Actions"),
    ("characteristicsDescription", "Characteristics"),
)


def abilities(record: dict) -> dict[str, dict[str, int]]:
    """Ability scores from ``stats`` with save proficiencies from ``savingThrows``."""
    scores = {code: {"value": 10, "proficient": 0} for code in ABILITIES.values()}
    for stat in as_list(record.get("stats")):
        stat = as_dict(stat)
        if codes.lookup(ABILITIES, stat.get("statId")):
            scores[codes.ability(stat["statId"])]["value"] = as_int(stat.get("value"), 10)
    for save in as_list(record.get("savingThrows")):
        save = as_dict(save)
        if codes.lookup(ABILITIES, save.get("statId")):
            scores[codes.ability(save["statId"])]["proficient"] = 1
    return scores


def skills(record: dict) -> dict[str, dict[str, Any]]:
    result: dict[str, dict[str, Any]] = {}
    for entry in as_list(record.get("skills")):
        entry = as_dict(entry)
        skill_id = entry.get("skillId")
        if skill_id is None:
            continue
        result[codes.skill(skill_id)] = {
            "value": 1,
            "ability": codes.skill_ability(skill_id),
            "bonus": as_int(entry.get("value"), 0),
        }
    return result


def movement(record: dict) -> dict[str, Any]:
    speeds: dict[str, Any] = {"walk": 0, "burrow": 0, "climb": 0, "fly": 0, "swim": 0, "units": "ft", "hover": False}
    for entry in as_list(record.get("movements")):
        entry = as_dict(entry)
        speeds[codes.movement(entry.get("movementId"))] = as_int(entry.get("speed"), 0)
        if "hover" in as_str(entry.get("notes")).lower():
            speeds["hover"] = True
    return speeds


def senses(record: dict) -> dict[str, Any]:
    result: dict[str, Any] = {"units": "ft", "special": ""}
    for entry in as_list(record.get("senses")):
        entry = as_dict(entry)
        sense = codes.lookup(SENSES, entry.get("senseId"))
        if sense is None:
            continue
        result[sense] = as_int(as_str(entry.get("notes")).split(" ")[0], 0)
    passive = as_int(record.get("passivePerception"), None)
    if passive:
        result["special"] = f"passive Perception {passive}"
    return result


def damage_adjustments(record: dict) -> dict[str, list[str]]:
    """Split ``damageAdjustments`` entries ({type, damageTypeId}) into di/dr/dv lists."""
    traits: dict[str, list[str]] = {"di": [], "dr": [], "dv": []}
    for entry in as_list(record.get("damageAdjustments")):
        entry = as_dict(entry)
        kind = codes.lookup(DAMAGE_ADJUSTMENT_KINDS, entry.get("type"))
        if kind is None:
            logger.debug(f"Skipping unrecognized damage adjustment {entry!r}")
            continue
        damage = codes.damage_type(entry.get("damageTypeId"))
        if damage not in traits[kind]:
            traits[kind].append(damage)
    return traits


def condition_immunities(record: dict) -> list[str]:
    result = []
    for entry in as_list(record.get("conditionImmunities")):
        condition_id = entry.get("conditionId") if isinstance(entry, dict) else entry
        code = codes.condition(condition_id)
        if code and code not in result:
            result.append(code)
    return result


def biography(record: dict) -> str:
    """Stat-block sections concatenated under their own headings."""
    sections = []
    for field, title in BIOGRAPHY_SECTIONS:
        html = as_str(record.get(field)).strip()
        if html:
            sections.append(f"<h3>{title}</h3>{html}")
    return "".join(sections)


def translate_monster(
    record: dict,
    *,
    import_method: str = "api",
    now: datetime | None = None,
) -> MonsterEntity:
    """
    Translate a provider monster into an NPC actor document.

    Raises:
        MissingDefinition: If the record has no id or name.
    """
    source_id = require_id(record, "monster")
    name = str(require(record, "name", "monster")).strip()

    hit_dice = as_dict(record.get("hitPointDice"))
    cr = codes.challenge_rating(record.get("challengeRatingId"))
    creature_type = codes.creature_type(record.get("typeId"))
    adjustments = damage_adjustments(record)
    size_code = codes.size(record.get("sizeId"))
    swarm_size = record.get("swarmSize") or (as_dict(record.get("swarm")).get("sizeId"))

    sources = as_list(record.get("sources"))
    book = codes.source_book(as_dict(sources[0]).get("sourceId")) if sources else codes.source_book(record.get("sourceId"))

    system = {
        "abilities": abilities(record),
        "skills": skills(record),
        "attributes": {
            "ac": {"flat": as_int(record.get("armorClass"), 10), "calc": "natural"},
            "hp": {
                "value": as_int(record.get("averageHitPoints"), 0),
                "max": as_int(record.get("averageHitPoints"), 0),
                "formula": as_str(hit_dice.get("diceString")) or dice_from_block(hit_dice),
            },
            "movement": movement(record),
            "senses": senses(record),
        },
        "details": {
            "type": {
                "value": creature_type,
                "subtype": as_str(record.get("subTypes")) if isinstance(record.get("subTypes"), str) else "",
                "swarm": codes.size(swarm_size) if swarm_size else "",
                "custom": "",
            },
            "cr": cr,
            "alignment": codes.alignment(record.get("alignmentId")),
            "source": {"book": book, "custom": "Homebrew" if record.get("isHomebrew") else ""},
            "biography": {
                "value": description_or_placeholder(biography(record), name),
            },
        },
        "traits": {
            "size": size_code,
            **{kind: {"value": values} for kind, values in adjustments.items()},
            "ci": {"value": condition_immunities(record)},
            "languages": {"custom": as_str(record.get("languageDescription"))},
        },
        "resources": {
            "legact": {"max": 3 if record.get("isLegendary") else 0},
        },
    }

    img = upscale_image(record.get("largeAvatarUrl") or record.get("basicAvatarUrl") or record.get("avatarUrl"))

    logger.debug(f"Translated monster '{name}' (CR {codes.challenge_rating_label(cr)} {creature_type})")
    return MonsterEntity(
        name=name,
        img=img or DEFAULT_MONSTER_IMAGE,
        system=system,
        flags=provenance(source_id, import_method, now),
        prototype_token={
            "name": name,
            "texture": {"src": img or DEFAULT_MONSTER_IMAGE},
            "width": {"tiny": 0.5, "sm": 1, "med": 1, "lg": 2, "huge": 3, "grg": 4}[size_code],
        },
    )


__all__ = [
    "abilities",
    "biography",
    "condition_immunities",
    "damage_adjustments",
    "movement",
    "senses",
    "skills",
    "translate_monster",
]
