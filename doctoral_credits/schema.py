import math
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional, Union

class ActivityType(Enum):
    COURSES = "courses"
    SEMINARS = "seminars"
    LABS = "labs"
    TRANSVERSAL = "transversal"
    TEACHING = "teaching"
    TUTORING = "tutoring"
    EXTRA_CURRICULAR = "extraCurricular"
    DISSEMINATION = "dissemination"

@dataclass(frozen=True)
class HourBased:
    """Activity type credited per unit of classroom + autonomous hours."""
    name: str
    classroom_hours_per_unit: float
    autonomous_hours_per_unit: float
    credit_per_unit: float

@dataclass(frozen=True)
class DayBased:
    """Activity type credited per day attended."""
    name: str
    credit_per_day: float

ActivityTypeDefinition = Union[HourBased, DayBased]

def to_number(value: Any) -> float:
    """
    Coerces form/CSV input into a float.
    Anything that is not a finite number becomes 0.0 (never raises).
    """
    if value is None or isinstance(value, bool):
        return 0.0

    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", ".")
        try:
            number = float(text)
        except ValueError:
            return 0.0

    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number

def to_date(value: Any) -> Optional[date]:
    """Coerces a date-like value (date, datetime, ISO string) or returns None."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None

def new_uid() -> str:
    return uuid.uuid4().hex

@dataclass(frozen=True)
class ActivityEntry:
    title: str
    date_from: Optional[date]
    date_to: Optional[date] = None
    classroom_hours: float = 0.0
    autonomous_hours: float = 0.0
    days: Optional[float] = None
    activity_type: Optional[str] = None
    uid: str = field(default_factory=new_uid)

    def is_complete(self) -> bool:
        """An entry needs a non-blank title and a start date to be stored."""
        return bool(self.title and self.title.strip()) and self.date_from is not None

    @classmethod
    def from_form(cls,
                  title: Any,
                  date_from: Any,
                  date_to: Any = None,
                  classroom_hours: Any = None,
                  autonomous_hours: Any = None,
                  days: Any = None,
                  activity_type: Optional[str] = None) -> "ActivityEntry":
        """
        Builds an entry from raw UI values.

        Numbers go through `to_number` so junk input silently becomes 0.
        `days` stays None when not supplied (hour-based entries).
        """
        return cls(
            title=str(title or "").strip(),
            date_from=to_date(date_from),
            date_to=to_date(date_to),
            classroom_hours=to_number(classroom_hours),
            autonomous_hours=to_number(autonomous_hours),
            days=None if days is None else to_number(days),
            activity_type=activity_type,
        )

    def to_record(self) -> dict:
        """Serialises to the camelCase record stored under `doctoralActivities`."""
        return {
            "id": self.uid,
            "title": self.title,
            "dateFrom": self.date_from.isoformat() if self.date_from else None,
            "dateTo": self.date_to.isoformat() if self.date_to else None,
            "classroomHours": self.classroom_hours,
            "autonomousHours": self.autonomous_hours,
            "days": self.days,
            "activityType": self.activity_type,
        }

    @classmethod
    def from_record(cls, record: dict, activity_type: Optional[str] = None) -> "ActivityEntry":
        raw_days = record.get("days")
        return cls(
            title=str(record.get("title") or ""),
            date_from=to_date(record.get("dateFrom")),
            date_to=to_date(record.get("dateTo")),
            classroom_hours=to_number(record.get("classroomHours")),
            autonomous_hours=to_number(record.get("autonomousHours")),
            days=None if raw_days is None or raw_days == "" else to_number(raw_days),
            activity_type=record.get("activityType") or activity_type,
            uid=str(record.get("id") or new_uid()),
        )
