"""
Item translation.

Handles both inventory wrappers (``{"definition": {...}, "quantity": 2,
"equipped": true, "isAttuned": false}``) and bare item definitions.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from ..activities.dice import dice_from_block
from ..models import DamagePart, ItemEntity, Range
from . import codes
from .common import (
    as_dict,
    as_int,
    as_list,
    as_str,
    assemble_description,
    attunement,
    description_or_placeholder,
    provenance,
    require,
    require_id,
    source_label,
    upscale_image,
)
from .schema import ARMOR_TYPES, ITEM_FILTER_TYPES, WEAPON_PROPERTIES

logger = logging.getLogger("beyond-bridge")

DEFAULT_ITEM_IMAGE = "icons/svg/item-bag.svg"

CONSUMABLE_TYPES = {
    "potion": "potion",
    "scroll": "scroll",
    "ammunition": "ammo",
}


def item_type(definition: dict) -> str:
    """Pick the dnd5e item type from ``filterType``, falling back to ``type``."""
    for key in ("filterType", "type"):
        value = definition.get(key)
        if isinstance(value, str):
            mapped = ITEM_FILTER_TYPES.get(value) or ITEM_FILTER_TYPES.get(value.title())
            if mapped:
                return mapped
    logger.debug(f"No item type mapping for '{definition.get('filterType')}', using loot")
    return "loot"


def _number(value: Any) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    return 0.0


def price_gp(definition: dict) -> float:
    """Price in gold pieces.

    A plain number is already gp. A ``{"quantity": n}`` block is copper unless
    it names another unit.
    """
    cost = definition.get("cost")
    if isinstance(cost, (int, float)) and not isinstance(cost, bool):
        return float(cost)
    cost = as_dict(cost)
    quantity = cost.get("quantity")
    if not isinstance(quantity, (int, float)):
        return 0.0
    unit = as_str(cost.get("unit")).lower() or "cp"
    per_gp = {"cp": 100, "sp": 10, "ep": 2, "gp": 1, "pp": 0.1}.get(unit, 1)
    return quantity / per_gp


def weapon_properties(definition: dict) -> set[str]:
    properties: set[str] = set()
    for prop in as_list(definition.get("properties")):
        code = WEAPON_PROPERTIES.get(as_str(as_dict(prop).get("name")))
        if code:
            properties.add(code)
    return properties


def _weapon_system(definition: dict) -> dict[str, Any]:
    damage = as_dict(definition.get("damage"))
    formula = dice_from_block(damage)
    damage_type = codes.damage_type_name(definition.get("damageType"))
    parts = [DamagePart(formula=formula, types={damage_type} if damage_type else set())] if formula else []

    attack_type = as_int(definition.get("attackType"), 1)
    normal = as_int(definition.get("range"), None)
    long_range = as_int(definition.get("longRange"), None)

    return {
        "type": {"value": as_str(definition.get("type")).lower(), "baseItem": ""},
        "properties": sorted(weapon_properties(definition)),
        "damage": {"parts": parts},
        "range": Range(
            value=normal or 5,
            long=long_range if long_range and long_range != normal else None,
        ),
        "actionType": "rwak" if attack_type == 2 else "mwak",
    }


def _equipment_system(definition: dict) -> dict[str, Any]:
    armor_type = codes.lookup(ARMOR_TYPES, definition.get("armorTypeId"))
    armor_class = as_int(definition.get("armorClass"), None)
    if armor_type is None:
        armor_type = "trinket" if armor_class is None else "light"

    dex_cap = {"light": None, "medium": 2, "heavy": 0}.get(armor_type)
    return {
        "type": {"value": armor_type, "baseItem": ""},
        "armor": {"value": armor_class, "dex": dex_cap},
        "strength": as_int(definition.get("strengthRequirement"), None),
        "stealth": bool(definition.get("stealthCheck") == 2),
    }


def _consumable_system(definition: dict, quantity: int) -> dict[str, Any]:
    kind = CONSUMABLE_TYPES.get(as_str(definition.get("filterType") or definition.get("type")).lower(), "trinket")
    return {
        "type": {"value": kind, "subtype": ""},
        "uses": {"value": quantity, "max": str(quantity), "autoDestroy": True},
    }


def translate_item(
    record: dict,
    *,
    import_method: str = "api",
    now: datetime | None = None,
) -> ItemEntity:
    """
    Translate a provider item into an item document.

    Raises:
        MissingDefinition: If the definition has no id or name.
    """
    definition = as_dict(record.get("definition"))
    wrapper = record if definition else {}
    definition = definition or record

    source_id = require_id(definition, "item")
    name = str(require(definition, "name", "item")).strip()
    kind = item_type(definition)
    quantity = as_int(wrapper.get("quantity"), None) or as_int(definition.get("bundleSize"), None) or 1

    description = assemble_description(definition.get("description"), definition.get("higherLevelDescription"))
    rarity_name = definition.get("rarity")

    system: dict[str, Any] = {
        "description": {"value": description_or_placeholder(description, name), "chat": "", "unidentified": ""},
        "source": source_label(definition),
        "quantity": quantity,
        "weight": {"value": _number(definition.get("weight")), "units": "lb"},
        "price": {"value": price_gp(definition), "denomination": "gp"},
        "attunement": attunement(
            definition.get("requiresAttunement") or definition.get("canAttune"),
            wrapper.get("isAttuned"),
        ),
        "equipped": bool(wrapper.get("equipped")),
        "rarity": codes.item_rarity(rarity_name) if rarity_name else "",
        "identified": True,
        "properties": ["mgc"] if definition.get("magic") else [],
    }

    if kind == "weapon":
        weapon = _weapon_system(definition)
        weapon["properties"] = sorted(set(weapon["properties"]) | set(system["properties"]))
        system.update(weapon)
    elif kind == "equipment":
        system.update(_equipment_system(definition))
    elif kind == "consumable":
        system.update(_consumable_system(definition, quantity))
    elif kind == "tool":
        system.update({"type": {"value": "tool", "baseItem": ""}, "ability": "int", "proficient": 0})

    img = upscale_image(definition.get("largeAvatarUrl") or definition.get("avatarUrl")) or DEFAULT_ITEM_IMAGE

    logger.debug(f"Translated item '{name}' as {kind}")
    return ItemEntity(
        name=name,
        type=kind,
        img=img,
        system=system,
        flags=provenance(source_id, import_method, now),
    )


__all__ = [
    "item_type",
    "price_gp",
    "translate_item",
    "weapon_properties",
]
