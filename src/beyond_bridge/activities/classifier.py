"""
Heuristic activity classification.

An entity's mechanical effects are described by activities. Each activity
kind has one rule: a predicate deciding whether it applies and a builder
producing the Activity. Rules run in a fixed order and the utility fallback
fires only when no other rule did, so every classified entity ends up with
at least one activity.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, NamedTuple

from ..models import (
    Activation,
    Activity,
    ActivityDamage,
    AttackBlock,
    AttackType,
    DamagePart,
    Duration,
    HealingBlock,
    Range,
    SaveBlock,
    Target,
    TargetEntity,
)
from ..translators import codes
from ..translators.common import activation, as_dict, as_int, as_list, as_str, duration, range_, slugify, target
from .dice import damage_parts, healing_formula, scaling_formula

logger = logging.getLogger("beyond-bridge")

SORT_STEP = 100000

# attackType codes: 1 melee weapon, 2 ranged weapon, 3 melee spell, 4 ranged spell
MELEE_ATTACK_TYPES = {1, 3}
WEAPON_ATTACK_TYPES = {1, 2}

# dnd5e actionType -> provider attackType code
ACTION_TYPE_CODES = {"mwak": 1, "rwak": 2, "msak": 3, "rsak": 4}


@dataclass
class ClassifierInput:
    """The signals the rules look at, read from a source definition or a translated entity."""
    name: str
    description: str = ""
    higher_level: str = ""
    requires_attack_roll: bool = False
    attack_type: int = 0
    weapon: bool = False
    requires_saving_throw: bool = False
    save_ability_id: int | None = None
    save_ability: str = ""
    healing: bool = False
    healing_dice: list = field(default_factory=list)
    damage: list[DamagePart] = field(default_factory=list)
    activation: Activation = field(default_factory=Activation)
    range: Range = field(default_factory=Range)
    duration: Duration = field(default_factory=Duration)
    target: Target = field(default_factory=Target)

    @classmethod
    def from_source(cls, record: dict) -> "ClassifierInput":
        """Read signals from a provider record (bare definition or wrapper with ``definition``)."""
        definition = as_dict(record.get("definition")) or as_dict(record)

        damage_dice = as_list(definition.get("damageDice")) or as_list(definition.get("dice"))
        weapon_damage = as_dict(definition.get("damage"))
        if not damage_dice and weapon_damage:
            damage_dice = [{**weapon_damage, "damageType": definition.get("damageType")}]

        higher_level = as_str(definition.get("higherLevelDescription")) or as_str(
            definition.get("higherLevelDefinition")
        )
        scale_dice = as_list(definition.get("higherLevelDice")) or as_list(definition.get("scaleType"))
        description = as_str(definition.get("description"))
        range_block = definition.get("range")

        attack_type = as_int(definition.get("attackType"), 0) or 0

        return cls(
            name=as_str(definition.get("name")) or "Unnamed",
            description=description,
            higher_level=higher_level,
            requires_attack_roll=bool(definition.get("requiresAttackRoll")),
            attack_type=attack_type,
            weapon=attack_type in WEAPON_ATTACK_TYPES,
            requires_saving_throw=bool(definition.get("requiresSavingThrow")),
            save_ability_id=as_int(definition.get("saveDcAbilityId"), None),
            healing=bool(definition.get("healing")),
            healing_dice=as_list(definition.get("healingDice")),
            damage=damage_parts(damage_dice, description, scaling_formula(scale_dice, higher_level)),
            activation=activation(definition.get("activation")),
            range=range_(range_block) if isinstance(range_block, dict) else Range(),
            duration=duration(definition.get("duration"), bool(definition.get("concentration"))),
            target=target(range_block),
        )

    @classmethod
    def from_entity(cls, entity: TargetEntity) -> "ClassifierInput":
        """Read signals back from a translated entity's system payload."""
        system = entity.system
        action_type = as_str(system.get("actionType"))
        save = as_dict(system.get("save"))
        formula = as_str(system.get("formula"))
        attack_type = as_int(system.get("attackType"), 0) or ACTION_TYPE_CODES.get(action_type, 0)
        parts = [
            part if isinstance(part, DamagePart) else DamagePart.model_validate(part)
            for part in as_list(as_dict(system.get("damage")).get("parts"))
        ]

        return cls(
            name=entity.name,
            description=as_str(as_dict(system.get("description")).get("value")),
            attack_type=attack_type,
            weapon=attack_type in WEAPON_ATTACK_TYPES,
            save_ability=as_str(save.get("ability")),
            requires_saving_throw=action_type == "save" or bool(save.get("ability")),
            healing=action_type == "heal" or bool(formula),
            healing_dice=[{"diceString": formula}] if formula else [],
            damage=parts,
            activation=_model(Activation, system.get("activation")),
            range=_model(Range, system.get("range")),
            duration=_model(Duration, system.get("duration")),
            target=_model(Target, system.get("target")),
        )


def _model(model: type, value: Any) -> Any:
    if isinstance(value, model):
        return value
    if isinstance(value, dict):
        return model.model_validate(value)
    return model()


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

def _base(source: ClassifierInput, kind: str, index: int) -> dict[str, Any]:
    return {
        "id": f"{slugify(source.name)}-{kind}",
        "name": f"{source.name} {kind.title()}",
        "sort": index * SORT_STEP,
        "activation": source.activation.model_copy(),
        "range": source.range.model_copy(),
        "duration": source.duration.model_copy(),
        "target": source.target.model_copy(),
    }


def _copy_parts(source: ClassifierInput) -> list[DamagePart]:
    return [part.model_copy(deep=True) for part in source.damage]


def is_attack(source: ClassifierInput) -> bool:
    return source.requires_attack_roll or source.attack_type != 0


def build_attack(source: ClassifierInput, index: int) -> Activity:
    attack_type = AttackType(
        value="melee" if source.attack_type in MELEE_ATTACK_TYPES else "ranged",
        classification="weapon" if source.weapon else "spell",
    )
    return Activity(
        type="attack",
        attack=AttackBlock(type=attack_type),
        damage=ActivityDamage(parts=_copy_parts(source)),
        **_base(source, "attack", index),
    )


def is_save(source: ClassifierInput) -> bool:
    return source.requires_saving_throw or bool(source.save_ability_id)


def build_save(source: ClassifierInput, index: int) -> Activity:
    parts = _copy_parts(source)
    ability = source.save_ability or codes.ability(source.save_ability_id, default="dex")
    return Activity(
        type="save",
        save=SaveBlock(ability=ability),
        damage=ActivityDamage(on_save="half" if parts else "none", parts=parts),
        **_base(source, "save", index),
    )


def is_heal(source: ClassifierInput) -> bool:
    return source.healing or bool(source.healing_dice)


def build_heal(source: ClassifierInput, index: int) -> Activity:
    return Activity(
        type="heal",
        healing=HealingBlock(formula=healing_formula(source.healing_dice, source.description)),
        **_base(source, "heal", index),
    )


def build_utility(source: ClassifierInput, index: int) -> Activity:
    return Activity(type="utility", **_base(source, "utility", index))


class Rule(NamedTuple):
    slug: str
    predicate: Callable[[ClassifierInput], bool]
    builder: Callable[[ClassifierInput, int], Activity]


RULES: tuple[Rule, ...] = (
    Rule("attack", is_attack, build_attack),
    Rule("save", is_save, build_save),
    Rule("heal", is_heal, build_heal),
)

UTILITY_RULE = Rule("utility", lambda source: True, build_utility)


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

def _as_input(subject: ClassifierInput | TargetEntity | dict) -> ClassifierInput:
    if isinstance(subject, ClassifierInput):
        return subject
    if isinstance(subject, TargetEntity):
        return ClassifierInput.from_entity(subject)
    return ClassifierInput.from_source(subject)


def classify(
    subject: ClassifierInput | TargetEntity | dict,
    rules: tuple[Rule, ...] = RULES,
) -> dict[str, Activity]:
    """
    Derive the activities of an entity.

    Args:
        subject: A translated entity, a provider record or a prepared ClassifierInput.
        rules: Ordered rules to evaluate.

    Returns:
        Mapping of activity id to Activity, never empty.
    """
    source = _as_input(subject)
    activities: dict[str, Activity] = {}

    for rule in rules:
        if rule.predicate(source):
            activity = rule.builder(source, len(activities))
            activities[activity.id] = activity

    if not activities:
        activity = UTILITY_RULE.builder(source, 0)
        activities[activity.id] = activity

    logger.debug(f"Classified '{source.name}': {', '.join(a.type for a in activities.values())}")
    return activities


def classify_entity(entity: TargetEntity, source: dict | None = None) -> TargetEntity:
    """Attach activities to ``entity.system['activities']`` and return the entity.

    When the provider record is available it is used as the signal source,
    since it carries more than the translated payload.
    """
    subject = ClassifierInput.from_source(source) if source else ClassifierInput.from_entity(entity)
    if source:
        subject.name = entity.name
    entity.system["activities"] = classify(subject)
    return entity


__all__ = [
    "ClassifierInput",
    "RULES",
    "Rule",
    "SORT_STEP",
    "UTILITY_RULE",
    "build_attack",
    "build_heal",
    "build_save",
    "build_utility",
    "classify",
    "classify_entity",
    "is_attack",
    "is_heal",
    "is_save",
]
