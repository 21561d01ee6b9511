"""
D&D Beyond code tables.

These map the provider's numeric ids and display names to the short codes
used by the dnd5e schema. Tables are read-only mapping proxies built once at
import time; use the total lookup functions in ``codes`` rather than
indexing them directly.
"""

import re
from types import MappingProxyType

# ---------------------------------------------------------------------------
# Ability scores (statId / saveDcAbilityId)
# ---------------------------------------------------------------------------

ABILITIES = MappingProxyType({
    1: "str",
    2: "dex",
    3: "con",
    4: "int",
    5: "wis",
    6: "cha",
})

# ---------------------------------------------------------------------------
# Damage types
# ---------------------------------------------------------------------------

DAMAGE_TYPES = MappingProxyType({
    1: "acid",
    2: "cold",
    3: "fire",
    4: "force",
    5: "lightning",
    6: "necrotic",
    7: "poison",
    8: "psychic",
    9: "radiant",
    10: "thunder",
    11: "bludgeoning",
    12: "piercing",
    13: "slashing",
})

# ---------------------------------------------------------------------------
# Conditions
# ---------------------------------------------------------------------------

CONDITIONS = MappingProxyType({
    1: "blinded",
    2: "charmed",
    3: "deafened",
    4: "exhaustion",
    5: "frightened",
    6: "grappled",
    7: "incapacitated",
    8: "invisible",
    9: "paralyzed",
    10: "petrified",
    11: "poisoned",
    12: "prone",
    13: "restrained",
    14: "stunned",
    15: "unconscious",
})

EXHAUSTION_CONDITION_ID = 4
MAX_EXHAUSTION_LEVEL = 6

# ---------------------------------------------------------------------------
# Skills: id -> (code, governing ability)
# ---------------------------------------------------------------------------

SKILLS = MappingProxyType({
    1: ("acr", "dex"),   # Acrobatics
    2: ("ani", "wis"),   # Animal Handling
    3: ("arc", "int"),   # Arcana
    4: ("ath", "str"),   # Athletics
    5: ("dec", "cha"),   # Deception
    6: ("his", "int"),   # History
    7: ("ins", "wis"),   # Insight
    8: ("itm", "cha"),   # Intimidation
    9: ("inv", "int"),   # Investigation
    10: ("med", "wis"),  # Medicine
    11: ("nat", "int"),  # Nature
    12: ("prc", "wis"),  # Perception
    13: ("prf", "cha"),  # Performance
    14: ("per", "cha"),  # Persuasion
    15: ("rel", "int"),  # Religion
    16: ("slt", "dex"),  # Sleight of Hand
    17: ("ste", "dex"),  # Stealth
    18: ("sur", "wis"),  # Survival
})

# ---------------------------------------------------------------------------
# Creature sizes (ids start at 2 in the provider data)
# ---------------------------------------------------------------------------

SIZES = MappingProxyType({
    2: "tiny",
    3: "sm",
    4: "med",
    5: "lg",
    6: "huge",
    7: "grg",
})

# ---------------------------------------------------------------------------
# Alignments
# ---------------------------------------------------------------------------

ALIGNMENTS = MappingProxyType({
    1: "lawful good",
    2: "neutral good",
    3: "chaotic good",
    4: "lawful neutral",
    5: "neutral",
    6: "chaotic neutral",
    7: "lawful evil",
    8: "neutral evil",
    9: "chaotic evil",
    10: "unaligned",
})

# ---------------------------------------------------------------------------
# Creature types
# ---------------------------------------------------------------------------

CREATURE_TYPES = MappingProxyType({
    1: "aberration",
    2: "beast",
    3: "celestial",
    4: "construct",
    5: "custom",
    6: "dragon",
    7: "elemental",
    8: "fey",
    9: "fiend",
    10: "giant",
    11: "humanoid",
    12: "swarm",
    13: "monstrosity",
    14: "ooze",
    15: "plant",
    16: "undead",
})

# ---------------------------------------------------------------------------
# Challenge rating ids -> numeric CR
# ---------------------------------------------------------------------------

CHALLENGE_RATINGS = MappingProxyType({
    1: 0,
    2: 0.125,
    3: 0.25,
    4: 0.5,
    **{cr_id: cr_id - 4 for cr_id in range(5, 35)},
})

# ---------------------------------------------------------------------------
# Source books (subset of the provider's source ids)
# ---------------------------------------------------------------------------

SOURCE_BOOKS = MappingProxyType({
    1: "BR",       # Basic Rules
    2: "PHB",      # Player's Handbook
    3: "DMG",      # Dungeon Master's Guide
    4: "EEPC",     # Elemental Evil Player's Companion
    5: "MM",       # Monster Manual
    6: "CoS",      # Curse of Strahd
    7: "HotDQ",    # Hoard of the Dragon Queen
    8: "LMoP",     # Lost Mine of Phandelver
    9: "OotA",     # Out of the Abyss
    10: "PotA",    # Princes of the Apocalypse
    11: "RoT",     # The Rise of Tiamat
    12: "SKT",     # Storm King's Thunder
    13: "SCAG",    # Sword Coast Adventurer's Guide
    14: "TftYP",   # Tales from the Yawning Portal
    15: "VGtM",    # Volo's Guide to Monsters
    27: "XGtE",    # Xanathar's Guide to Everything
    33: "MToF",    # Mordenkainen's Tome of Foes
    67: "TCoE",    # Tasha's Cauldron of Everything
})

# ---------------------------------------------------------------------------
# Spell schools (display name -> code)
# ---------------------------------------------------------------------------

SPELL_SCHOOLS = MappingProxyType({
    "abjuration": "abj",
    "conjuration": "con",
    "divination": "div",
    "enchantment": "enc",
    "evocation": "evo",
    "illusion": "ill",
    "necromancy": "nec",
    "transmutation": "trs",
})

# ---------------------------------------------------------------------------
# Item rarity (display name -> code)
# ---------------------------------------------------------------------------

ITEM_RARITIES = MappingProxyType({
    "common": "common",
    "uncommon": "uncommon",
    "rare": "rare",
    "very rare": "veryRare",
    "legendary": "legendary",
    "artifact": "artifact",
})

# ---------------------------------------------------------------------------
# Movement ids (monster movements)
# ---------------------------------------------------------------------------

MOVEMENTS = MappingProxyType({
    1: "walk",
    2: "burrow",
    3: "climb",
    4: "fly",
    5: "swim",
})

# Monster senses
SENSES = MappingProxyType({
    1: "blindsight",
    2: "darkvision",
    3: "tremorsense",
    4: "truesight",
})

# Monster damage adjustment kinds
DAMAGE_ADJUSTMENT_KINDS = MappingProxyType({
    1: "dr",  # resistance
    2: "di",  # immunity
    3: "dv",  # vulnerability
})

# ---------------------------------------------------------------------------
# Spellcasting progression (spellRules.multiClassSpellSlotDivisor)
# ---------------------------------------------------------------------------

SPELL_PROGRESSIONS = MappingProxyType({
    1: "full",
    2: "half",
    3: "third",
})

# ---------------------------------------------------------------------------
# Resource costs: activation, duration, range, area shape, usage recovery
# ---------------------------------------------------------------------------

ACTIVATION_TYPES = MappingProxyType({
    1: "action",
    2: "none",
    3: "bonus",
    4: "reaction",
    5: "special",
    6: "minute",
    7: "hour",
    8: "day",
})

DURATION_UNITS = MappingProxyType({
    "Instantaneous": "inst",
    "Round": "round",
    "Minute": "minute",
    "Hour": "hour",
    "Day": "day",
    "Permanent": "perm",
    "Special": "spec",
    "Concentration": "minute",
    "Until Dispelled": "perm",
    "Time": "minute",
})

RANGE_ORIGINS = MappingProxyType({
    "Self": "self",
    "Touch": "touch",
    "Ranged": "ft",
    "Sight": "spec",
    "Unlimited": "any",
})

AREA_SHAPES = MappingProxyType({
    "Line": "line",
    "Cone": "cone",
    "Cube": "cube",
    "Cylinder": "cylinder",
    "Sphere": "sphere",
    "Square": "square",
})

RESET_TYPES = MappingProxyType({
    1: "sr",
    2: "lr",
    3: "day",
    4: "charges",
})

# ---------------------------------------------------------------------------
# Item categories (provider filterType -> dnd5e item type)
# ---------------------------------------------------------------------------

ITEM_FILTER_TYPES = MappingProxyType({
    "Weapon": "weapon",
    "Armor": "equipment",
    "Shield": "equipment",
    "Ring": "equipment",
    "Rod": "equipment",
    "Wondrous item": "equipment",
    "Wondrous Item": "equipment",
    "Staff": "weapon",
    "Wand": "equipment",
    "Potion": "consumable",
    "Scroll": "consumable",
    "Ammunition": "consumable",
    "Tool": "tool",
    "Gaming Set": "tool",
    "Musical Instrument": "tool",
    "Container": "container",
    "Other Gear": "loot",
    "Adventuring Gear": "loot",
})

# Weapon property names -> dnd5e property codes
WEAPON_PROPERTIES = MappingProxyType({
    "Ammunition": "amm",
    "Finesse": "fin",
    "Heavy": "hvy",
    "Light": "lgt",
    "Loading": "lod",
    "Reach": "rch",
    "Special": "spc",
    "Thrown": "thr",
    "Two-Handed": "two",
    "Versatile": "ver",
})

# Armor type ids -> dnd5e equipment type
ARMOR_TYPES = MappingProxyType({
    1: "light",
    2: "medium",
    3: "heavy",
    4: "shield",
})

# ---------------------------------------------------------------------------
# Free-text patterns
# ---------------------------------------------------------------------------

DICE_PATTERN = re.compile(r"(\d+d\d+)")
DICE_WITH_BONUS_PATTERN = re.compile(r"(\d+d\d+(?:\s*\+\s*\d+)?)")
DAMAGE_TEXT_PATTERN = re.compile(r"(\d+d\d+(?:\s*\+\s*\d+)?)\s+(\w+)\s+damage", re.IGNORECASE)
GP_COST_PATTERN = re.compile(r"(\d[\d,]*)\s*gp\b", re.IGNORECASE)

# Provider thumbnail URLs: /thumbnails/<a>/<b>/<w>/<h>/<file>.<ext>
THUMBNAIL_PATTERN = re.compile(
    r"/thumbnails/(\d*)/(\d*)/(\d*)/(\d*)/(\d*)\.(jpg|png|jpeg|webp|gif)"
)
