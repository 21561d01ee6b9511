"""
Class translation.

Features come from two places: the structured ``classFeatures`` list of the
provider record and the feature links of the class page's progression
table. Both are merged; when both describe the same (name, level) pair the
structured entry wins.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from bs4 import BeautifulSoup

from ..markup.features import parse_features, parse_progression
from ..models import ClassEntity, Feature, ProgressionRow
from . import codes
from .common import (
    as_dict,
    as_int,
    as_list,
    as_str,
    assemble_description,
    description_or_placeholder,
    provenance,
    require,
    require_id,
    slugify,
    source_label,
    upscale_image,
)
from .schema import SPELL_PROGRESSIONS

logger = logging.getLogger("beyond-bridge")

DEFAULT_HIT_DIE = 8


def structured_features(entries: Any) -> list[Feature]:
    """Features from a ``classFeatures`` list (bare entries or ``{"definition": ...}`` wrappers)."""
    features: list[Feature] = []
    for entry in as_list(entries):
        if not isinstance(entry, dict):
            continue
        entry = as_dict(entry.get("definition")) or entry
        name = as_str(entry.get("name")).strip()
        if not name:
            continue
        description = as_str(entry.get("description")) or as_str(entry.get("snippet"))
        features.append(Feature(
            name=name,
            description=description_or_placeholder(description, name),
            required_level=as_int(entry.get("requiredLevel"), 1) or 1,
        ))
    return features


def merge_features(markup: list[Feature], structured: list[Feature]) -> list[Feature]:
    """
    Merge markup-derived and structured features.

    Structured entries replace markup entries with the same (name, level);
    the result is ordered by level, keeping first-seen order within a level.
    """
    merged: dict[tuple[str, int], Feature] = {}
    for feature in markup:
        merged.setdefault((feature.name, feature.required_level), feature)
    for feature in structured:
        key = (feature.name, feature.required_level)
        if key in merged:
            logger.debug(f"Structured data overrides markup for feature '{feature.name}' (level {feature.required_level})")
        merged[key] = feature
    return sorted(merged.values(), key=lambda f: f.required_level)


def spellcasting(definition: dict) -> dict[str, str]:
    """Spellcasting progression and ability, ``none`` for non-casters."""
    if not definition.get("canCastSpells") and not definition.get("spellCastingAbilityId"):
        return {"progression": "none", "ability": ""}

    rules = as_dict(definition.get("spellRules"))
    if rules.get("isPactMagic") or as_str(definition.get("name")).lower() == "warlock":
        progression = "pact"
    else:
        progression = codes.lookup(SPELL_PROGRESSIONS, rules.get("multiClassSpellSlotDivisor")) or "full"

    ability_id = definition.get("spellCastingAbilityId")
    return {
        "progression": progression,
        "ability": codes.ability(ability_id) if ability_id else "",
    }


def saving_throws(definition: dict) -> list[str]:
    abilities = []
    for entry in as_list(definition.get("savingThrows")):
        stat_id = entry.get("statId") if isinstance(entry, dict) else entry
        if stat_id is not None:
            abilities.append(codes.ability(stat_id))
    return abilities


def _joined(value: Any, separator: str) -> str:
    if isinstance(value, list):
        return separator.join(as_str(item).strip() for item in value if as_str(item).strip())
    return as_str(value).strip()


# (record key, trait label, list separator)
CORE_TRAIT_FIELDS = (
    ("primaryAbility", "Primary Ability", " or "),
    ("savingThrowProficiencies", "Saving Throws", " and "),
    ("skillProficiencies", "Skill Proficiencies", ", "),
    ("weaponProficiencies", "Weapon Proficiencies", ", "),
    ("toolProficiencies", "Tool Proficiencies", ", "),
    ("armorProficiencies", "Armor Training", ", "),
    ("startingEquipment", "Starting Equipment", ", "),
)


def core_traits(definition: dict) -> dict[str, str]:
    """Core class traits as label -> text, skipping the ones the record leaves out."""
    traits: dict[str, str] = {}
    hit_die = as_int(definition.get("hitDie"), None)
    if hit_die:
        traits["Hit Die"] = f"D{hit_die} per {as_str(definition.get('name')).strip() or 'class'} level"
    for key, label, separator in CORE_TRAIT_FIELDS:
        text = _joined(definition.get(key), separator)
        if text:
            traits[label] = text
    return traits


def subclasses(definition: dict) -> list[dict[str, Any]]:
    """Every subclass listed on the definition, each with its own features."""
    result = []
    for entry in as_list(definition.get("subclasses")):
        if not isinstance(entry, dict):
            continue
        name = as_str(entry.get("name")).strip()
        if not name:
            continue
        features = structured_features(as_list(entry.get("features")) or as_list(entry.get("classFeatures")))
        result.append({
            "name": name,
            "overview": as_str(entry.get("description")) or as_str(entry.get("snippet")),
            "features": [f.model_dump(by_alias=True) for f in features],
        })
    return result


def advancement(features: list[Feature]) -> list[dict[str, Any]]:
    """HitPoints advancement plus one ItemGrant per level that grants features."""
    steps: list[dict[str, Any]] = [{"type": "HitPoints", "configuration": {}, "value": {}}]
    by_level: dict[int, list[str]] = {}
    for feature in features:
        by_level.setdefault(feature.required_level, []).append(feature.name)
    for level in sorted(by_level):
        steps.append({
            "type": "ItemGrant",
            "level": level,
            "title": "Features",
            "configuration": {"items": by_level[level]},
        })
    return steps


def translate_class(
    record: dict,
    *,
    features: list[Feature] | None = None,
    html: str | BeautifulSoup | None = None,
    import_method: str = "api",
    now: datetime | None = None,
) -> ClassEntity:
    """
    Translate a provider class into a class document.

    Args:
        record: Character class wrapper (``definition``, ``level``,
            ``subclassDefinition``) or a bare class definition.
        features: Features already extracted from the class page.
        html: Class page markup; parsed for features and progression when given.
        import_method: Recorded in the provenance block.
        now: Import timestamp; defaults to the current UTC time.

    Returns:
        ClassEntity

    Raises:
        MissingDefinition: If the definition has no id or name.
    """
    definition = as_dict(record.get("definition"))
    wrapper = record if definition else {}
    definition = definition or record

    source_id = require_id(definition, "class")
    name = str(require(definition, "name", "class")).strip()

    markup_features = list(features or [])
    progression: list[ProgressionRow] = []
    if html is not None:
        markup_features.extend(parse_features(html))
        progression = parse_progression(html)

    structured = structured_features(definition.get("classFeatures")) + structured_features(
        wrapper.get("classFeatures")
    )
    merged = merge_features(markup_features, structured)

    hit_die = as_int(definition.get("hitDie"), None)
    if not hit_die:
        logger.debug(f"Class '{name}' has no hit die, defaulting to d{DEFAULT_HIT_DIE}")
        hit_die = DEFAULT_HIT_DIE

    subclass = as_dict(wrapper.get("subclassDefinition"))
    subclass_features = structured_features(subclass.get("classFeatures"))

    system = {
        "description": {"value": description_or_placeholder(assemble_description(definition.get("description")), name)},
        "source": source_label(definition),
        "identifier": slugify(name),
        "hitDice": f"d{hit_die}",
        "levels": as_int(wrapper.get("level"), 1) or 1,
        "subclass": {
            "name": as_str(subclass.get("name")),
            "features": [f.model_dump(by_alias=True) for f in subclass_features],
        },
        "subclasses": subclasses(definition),
        "traits": core_traits(definition),
        "spellcasting": spellcasting(definition),
        "saves": saving_throws(definition),
        "advancement": advancement(merged),
    }

    logger.debug(f"Translated class '{name}' with {len(merged)} features")
    return ClassEntity(
        name=name,
        img=upscale_image(definition.get("largeAvatarUrl") or definition.get("portraitAvatarUrl")),
        system=system,
        flags=provenance(source_id, import_method, now),
        features=merged,
        progression=progression,
    )


__all__ = [
    "advancement",
    "core_traits",
    "merge_features",
    "saving_throws",
    "spellcasting",
    "structured_features",
    "subclasses",
    "translate_class",
]
