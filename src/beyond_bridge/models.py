"""
Target schema models.

These models represent documents in the dnd5e item/actor schema consumed by
the virtual tabletop. Field names follow Python conventions; the platform's
camelCase names are declared as aliases, so ``model_dump(by_alias=True)``
produces the persisted document.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_serializer


PROVENANCE_SCOPE = "beyond-bridge"

PLACEHOLDER_DESCRIPTION = "<p>No description found for {name}.</p>"

ActivityKind = Literal["attack", "save", "heal", "utility"]


class TargetModel(BaseModel):
    """Base for all target schema models."""
    model_config = ConfigDict(populate_by_name=True)


# =============================================================================
# Provenance
# =============================================================================

class Provenance(TargetModel):
    """Where a translated document came from."""
    source_id: int = Field(alias="sourceId", description="Provider id of the originating record")
    imported_at: datetime = Field(alias="importedAt", description="When the translation ran (UTC)")
    import_method: str = Field(default="api", alias="importMethod", description="How the record was obtained")


# =============================================================================
# Resource costs
# =============================================================================

class Activation(TargetModel):
    type: str = Field(default="action", description="Activation type code")
    value: int | None = Field(default=None, description="Activation cost (e.g. 1 for one action)")
    condition: str = Field(default="", description="Trigger text for reactions")


class Range(TargetModel):
    value: int | None = Field(default=None, description="Normal range")
    long: int | None = Field(default=None, description="Long range for ranged weapons")
    units: str = Field(default="ft", description="Range units code")
    special: str = Field(default="", description="Free-text range")


class Duration(TargetModel):
    value: int | None = Field(default=None, description="Duration amount")
    units: str = Field(default="inst", description="Duration units code")
    concentration: bool = False


class Target(TargetModel):
    """Area template or affected creatures."""
    type: str = Field(default="creature", description="Template shape or target kind")
    size: int | None = Field(default=None, description="Template size")
    units: str = Field(default="ft", description="Template size units")
    count: int | None = Field(default=None, description="Number of targets")


# =============================================================================
# Damage
# =============================================================================

class DamageScaling(TargetModel):
    mode: str = Field(default="", description="'whole' when damage scales with slot level, else empty")
    formula: str = Field(default="", description="Extra dice per step")


class DamagePart(TargetModel):
    """One damage roll."""
    formula: str = Field(description="Dice formula, e.g. '3d6' or '1d8 + 2'")
    types: set[str] = Field(default_factory=set, description="Damage type codes")
    scaling: DamageScaling = Field(default_factory=DamageScaling)

    @field_serializer("types")
    def _sorted_types(self, types: set[str]) -> list[str]:
        return sorted(types)


class ActivityDamage(TargetModel):
    on_save: Literal["half", "none"] | None = Field(
        default=None,
        alias="onSave",
        description="Damage applied on a successful save (save activities only)",
    )
    parts: list[DamagePart] = Field(default_factory=list)


# =============================================================================
# Activities
# =============================================================================

class AttackType(TargetModel):
    value: Literal["melee", "ranged"] = "melee"
    classification: Literal["weapon", "spell"] = "spell"


class AttackBlock(TargetModel):
    ability: str = Field(default="", description="Ability used for the attack roll, empty for the default")
    type: AttackType = Field(default_factory=AttackType)


class SaveBlock(TargetModel):
    ability: str = Field(description="Saving throw ability code")
    dc_calculation: str = Field(default="spellcasting", alias="dcCalculation")
    dc_formula: str = Field(default="", alias="dcFormula")


class HealingBlock(TargetModel):
    formula: str = Field(description="Healing dice formula")
    types: set[str] = Field(default_factory=lambda: {"healing"})

    @field_serializer("types")
    def _sorted_types(self, types: set[str]) -> list[str]:
        return sorted(types)


class Activity(TargetModel):
    """One mechanical effect of an entity."""
    id: str = Field(alias="_id", description="Stable slug, unique within the entity")
    type: ActivityKind
    name: str = ""
    sort: int = 0
    activation: Activation = Field(default_factory=Activation)
    range: Range = Field(default_factory=Range)
    duration: Duration = Field(default_factory=Duration)
    target: Target = Field(default_factory=Target)
    damage: ActivityDamage = Field(default_factory=ActivityDamage)
    attack: AttackBlock | None = None
    save: SaveBlock | None = None
    healing: HealingBlock | None = None


# =============================================================================
# Features
# =============================================================================

class Feature(TargetModel):
    """A named, leveled capability (class feature, trait)."""
    name: str
    description: str = ""
    required_level: int = Field(default=1, alias="requiredLevel")


class ProgressionRow(TargetModel):
    """One row of a class progression table."""
    level: int
    columns: dict[str, str] = Field(default_factory=dict)


# =============================================================================
# Entities
# =============================================================================

class TargetEntity(TargetModel):
    """Normalized document handed to the platform."""
    name: str
    type: str
    img: str = ""
    system: dict[str, Any] = Field(default_factory=dict, description="Category-specific mechanical payload")
    flags: dict[str, Any] = Field(default_factory=dict)

    @property
    def provenance(self) -> Provenance | None:
        block = self.flags.get(PROVENANCE_SCOPE)
        return Provenance.model_validate(block) if block else None

    @property
    def source_id(self) -> int | None:
        provenance = self.provenance
        return provenance.source_id if provenance else None

    @property
    def activities(self) -> dict[str, Activity]:
        return self.system.get("activities") or {}

    def to_document(self) -> dict[str, Any]:
        """Serialize to the platform's persisted document shape."""
        return self.model_dump(mode="json", by_alias=True)


class SpellEntity(TargetEntity):
    type: Literal["spell"] = "spell"


class ItemEntity(TargetEntity):
    type: Literal["weapon", "equipment", "consumable", "tool", "loot", "container"] = "loot"


class ClassEntity(TargetEntity):
    type: Literal["class"] = "class"
    features: list[Feature] = Field(default_factory=list)
    progression: list[ProgressionRow] = Field(default_factory=list)


class MonsterEntity(TargetEntity):
    type: Literal["npc"] = "npc"
    prototype_token: dict[str, Any] = Field(default_factory=dict, alias="prototypeToken")
