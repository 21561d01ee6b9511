"""
Helpers shared by the entity translators.

Source records are partially nullable, so every reader here tolerates a
missing or mistyped field and returns the schema's zero value instead.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any

from ..models import PLACEHOLDER_DESCRIPTION, PROVENANCE_SCOPE, Activation, Duration, Provenance, Range, Target
from . import codes
from .base import MissingDefinition
from .schema import GP_COST_PATTERN, THUMBNAIL_PATTERN

logger = logging.getLogger("beyond-bridge")


# ---------------------------------------------------------------------------
# Field readers
# ---------------------------------------------------------------------------

def require(record: dict, field: str, category: str) -> Any:
    """Return a mandatory identity field or raise MissingDefinition."""
    value = record.get(field) if isinstance(record, dict) else None
    if value is None or (isinstance(value, str) and not value.strip()):
        source_id = record.get("id") if isinstance(record, dict) else None
        raise MissingDefinition(category, field, source_id if field != "id" else None)
    return value


def require_id(record: dict, category: str) -> int:
    """Return the record's numeric id or raise MissingDefinition."""
    source_id = as_int(require(record, "id", category), None)
    if source_id is None:
        raise MissingDefinition(category, "id")
    return source_id


def as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def as_int(value: Any, default: int | None = 0) -> int | None:
    """Coerce numbers and numeric strings to int, else return ``default``."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    return default


def as_str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def slugify(name: str) -> str:
    """Lowercase ``name`` and replace every character outside a-z0-9 with a hyphen."""
    return re.sub(r"[^a-z0-9]", "-", name.lower())


def optional(record: dict, field: str, default: Any, category: str = "record") -> Any:
    """Read an optional field, logging a fallback when it is absent."""
    value = record.get(field)
    if value is None:
        logger.debug(f"{category} field '{field}' missing, defaulting to {default!r}")
        return default
    return value


# ---------------------------------------------------------------------------
# Provenance
# ---------------------------------------------------------------------------

def provenance(source_id: int, import_method: str = "api", now: datetime | None = None) -> dict[str, Any]:
    """Build the provenance flag block for a translated document."""
    block = Provenance(
        source_id=source_id,
        imported_at=now or datetime.now(timezone.utc),
        import_method=import_method,
    )
    return {PROVENANCE_SCOPE: block.model_dump(mode="json", by_alias=True)}


# ---------------------------------------------------------------------------
# Descriptions
# ---------------------------------------------------------------------------

def assemble_description(
    base: Any,
    higher_level: Any = None,
    tags: list[str] | None = None,
) -> str:
    """
    Assemble description HTML.

    Args:
        base: Main description HTML.
        higher_level: Optional "at higher levels" text, appended as its own block.
        tags: Optional tag names rendered as a leading ``Tags:`` paragraph.

    Returns:
        Description HTML, possibly empty.
    """
    description = as_str(base)
    if tags:
        description = f"<p><strong>Tags:</strong> {', '.join(tags)}</p>{description}"
    higher = as_str(higher_level).strip()
    if higher:
        description += f"<h3>At Higher Levels</h3><p>{higher}</p>"
    return description


def description_or_placeholder(text: str, name: str) -> str:
    return text if text.strip() else PLACEHOLDER_DESCRIPTION.format(name=name)


# ---------------------------------------------------------------------------
# Resource costs
# ---------------------------------------------------------------------------

def activation(block: Any) -> Activation:
    """Translate an ``activation`` block ({activationType, activationTime, activationCondition})."""
    block = as_dict(block)
    return Activation(
        type=codes.activation_type(block.get("activationType")),
        value=as_int(block.get("activationTime"), None),
        condition=as_str(block.get("activationCondition")),
    )


def range_(block: Any) -> Range:
    """Translate a ``range`` block ({origin, rangeValue})."""
    block = as_dict(block)
    origin = block.get("origin")
    return Range(
        value=as_int(block.get("rangeValue"), None) or None,
        units=codes.range_units(origin),
        special=as_str(origin) if origin == "Sight" else "",
    )


def duration(block: Any, concentration: bool = False) -> Duration:
    """
    Translate a ``duration`` block ({durationInterval, durationUnit, durationType}).

    Timed and concentration durations carry their unit separately; other
    duration types map directly.
    """
    block = as_dict(block)
    kind = block.get("durationType")
    unit = block.get("durationUnit")
    if kind in ("Time", "Concentration") and unit:
        units = codes.duration_unit(unit)
    else:
        units = codes.duration_unit(kind)
    return Duration(
        value=as_int(block.get("durationInterval"), None),
        units=units,
        concentration=concentration or kind == "Concentration",
    )


def target(block: Any) -> Target:
    """Translate the area portion of a ``range`` block ({aoeType, aoeValue})."""
    block = as_dict(block)
    return Target(
        type=codes.area_shape(block.get("aoeType")),
        size=as_int(block.get("aoeValue"), None),
    )


# ---------------------------------------------------------------------------
# Component and property flags
# ---------------------------------------------------------------------------

COMPONENT_IDS = {1: "vocal", 2: "somatic", 3: "material"}


def component_flags(definition: dict) -> set[str]:
    """Collect ritual/concentration and V/S/M flags.

    ``components`` is either a list of ids (1 V, 2 S, 3 M) or a mapping of
    booleans.
    """
    flags: set[str] = set()
    if definition.get("ritual"):
        flags.add("ritual")
    if definition.get("concentration"):
        flags.add("concentration")

    components = definition.get("components")
    if isinstance(components, list):
        flags.update(COMPONENT_IDS[c] for c in components if c in COMPONENT_IDS)
    elif isinstance(components, dict):
        for key, flag in (("verbal", "vocal"), ("somatic", "somatic"), ("material", "material")):
            if components.get(key):
                flags.add(flag)
    return flags


def attunement(requires: Any, attuned: Any = False) -> int:
    """Attunement state: 0 none, 1 required, 2 attuned."""
    if not requires:
        return 0
    return 2 if attuned else 1


def gp_cost(text: Any) -> int:
    """Extract a gold piece cost ("worth at least 300 gp") from free text."""
    match = GP_COST_PATTERN.search(as_str(text))
    if not match:
        return 0
    return int(match.group(1).replace(",", ""))


def source_label(definition: dict) -> dict[str, Any]:
    """Build the ``source`` block from a definition's first ``sources`` entry."""
    sources = as_list(definition.get("sources"))
    first = as_dict(sources[0]) if sources else {}
    book = codes.source_book(first.get("sourceId")) if first else ""
    page = first.get("pageNumber")
    return {
        "book": book,
        "page": str(page) if page else "",
        "custom": "" if book else as_str(definition.get("sourceName")),
    }


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------

def upscale_image(url: Any) -> str:
    """Point provider thumbnail URLs at their 1000x1000 rendition."""
    url = as_str(url)
    if not url:
        return ""
    url = THUMBNAIL_PATTERN.sub(r"/thumbnails/\1/\2/1000/1000/\5.\6", url)
    return url.replace(".com.com/", ".com/")


__all__ = [
    "PLACEHOLDER_DESCRIPTION",
    "activation",
    "as_dict",
    "as_int",
    "as_list",
    "as_str",
    "assemble_description",
    "attunement",
    "component_flags",
    "description_or_placeholder",
    "duration",
    "gp_cost",
    "optional",
    "provenance",
    "range_",
    "require",
    "require_id",
    "slugify",
    "source_label",
    "target",
    "upscale_image",
]
