"""
Static catalog of the doctoral program's training-activity types.

The table is fixed at eight entries and exposed read-only; the ledger and the
exporter iterate it in the order below.
"""

from types import MappingProxyType
from typing import List, Mapping, Union

from .schema import ActivityType, ActivityTypeDefinition, DayBased, HourBased

CATALOG: Mapping[str, ActivityTypeDefinition] = MappingProxyType({
    ActivityType.COURSES.value: HourBased(
        name="Courses (PhD, Unibo, external)",
        classroom_hours_per_unit=5,
        autonomous_hours_per_unit=20,
        credit_per_unit=1,
    ),
    ActivityType.SEMINARS.value: HourBased(
        name="Seminars",
        classroom_hours_per_unit=10,
        autonomous_hours_per_unit=15,
        credit_per_unit=1,
    ),
    ActivityType.LABS.value: HourBased(
        name="Labs",
        classroom_hours_per_unit=15,
        autonomous_hours_per_unit=10,
        credit_per_unit=1,
    ),
    ActivityType.TRANSVERSAL.value: HourBased(
        name="Transversal Skills",
        classroom_hours_per_unit=15,
        autonomous_hours_per_unit=10,
        credit_per_unit=1,
    ),
    ActivityType.TEACHING.value: HourBased(
        name="Teaching",
        classroom_hours_per_unit=5,
        autonomous_hours_per_unit=20,
        credit_per_unit=1,
    ),
    ActivityType.TUTORING.value: HourBased(
        name="Tutoring",
        classroom_hours_per_unit=20,
        autonomous_hours_per_unit=5,
        credit_per_unit=1,
    ),
    ActivityType.EXTRA_CURRICULAR.value: DayBased(
        name="Extra-curricular Activities",
        credit_per_day=0.5,
    ),
    ActivityType.DISSEMINATION.value: DayBased(
        name="Dissemination",
        credit_per_day=0.5,
    ),
})

def _key(type_key: Union[str, ActivityType]) -> str:
    return type_key.value if isinstance(type_key, ActivityType) else type_key

def definition_of(type_key: Union[str, ActivityType]) -> ActivityTypeDefinition:
    """
    Looks up an activity-type definition.

    Raises:
        KeyError: if `type_key` is not one of the catalog keys. The key set is
            closed, so this is a programming error rather than user input.
    """
    key = _key(type_key)
    try:
        return CATALOG[key]
    except KeyError:
        raise KeyError(f"Unknown activity type: {key!r}") from None

def activity_keys() -> List[str]:
    """Catalog keys in display order."""
    return list(CATALOG.keys())

def key_for_name(label: str) -> str:
    """
    Resolves a display name (or a raw key) back to its catalog key.
    Used when reading exported CSVs where the Type column holds display names.
    """
    label = (label or "").strip()
    if label in CATALOG:
        return label
    for key, definition in CATALOG.items():
        if definition.name.lower() == label.lower():
            return key
    raise KeyError(f"Unknown activity type: {label!r}")

def is_day_based(type_key: Union[str, ActivityType]) -> bool:
    return isinstance(definition_of(type_key), DayBased)
