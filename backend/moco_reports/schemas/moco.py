"""
MoCo API v1 records.

Raw JSON from the API is validated here, once, at the fetch boundary.
Downstream code only sees these models (and TimedRecord / Absence built
from them), never untyped dicts.
"""

import enum
import re
from datetime import date

from pydantic import BaseModel, ConfigDict, Field, field_validator

_CLOCK_RE = re.compile(r"^\d{1,2}:\d{2}$")


class _MocoModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)


class NamedRef(_MocoModel):
    id: int
    name: str


class UserRef(_MocoModel):
    id: int
    firstname: str = ""
    lastname: str = ""


class CategorySegment(_MocoModel):
    id: int | str
    name: str


class TimedRecord(_MocoModel):
    """Generic aggregation input: one dated value attributed to a category path."""

    date: date
    value: float
    category_path: tuple[CategorySegment, ...]


class Activity(_MocoModel):
    id: int
    date: date
    hours: float
    description: str | None = None
    project: NamedRef
    task: NamedRef
    user: UserRef | None = None
    billable: bool = False
    locked: bool = False

    def to_timed_record(self) -> TimedRecord:
        return TimedRecord(
            date=self.date,
            value=self.hours,
            category_path=(
                CategorySegment(id=self.project.id, name=self.project.name),
                CategorySegment(id=self.task.id, name=self.task.name),
            ),
        )


class ProjectTask(_MocoModel):
    id: int
    name: str
    active: bool = True
    billable: bool = True


class Project(_MocoModel):
    id: int
    name: str
    description: str | None = None
    active: bool = True
    currency: str | None = None
    budget: float | None = None
    customer: NamedRef | None = None
    leader: UserRef | None = None
    tasks: tuple[ProjectTask, ...] = ()


class Task(_MocoModel):
    id: int
    name: str
    active: bool = True
    billable: bool = True
    project: NamedRef


class Presence(_MocoModel):
    id: int
    date: date
    from_time: str | None = Field(default=None, alias="from")
    to_time: str | None = Field(default=None, alias="to")

    @field_validator("from_time", "to_time", mode="before")
    @classmethod
    def clock_or_empty(cls, v: str | None) -> str | None:
        # MoCo отдаёт "" или null для незакрытой отметки
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        if not isinstance(v, str) or not _CLOCK_RE.match(v.strip()):
            raise ValueError(f"Expected HH:MM, got {v!r}")
        return v.strip()

    @property
    def is_closed(self) -> bool:
        return self.from_time is not None and self.to_time is not None


class HolidayEntitlement(_MocoModel):
    id: int
    year: int
    title: str | None = None
    days: float | None = None
    hours: float | None = None


class ScheduleAssignment(_MocoModel):
    id: int | None = None
    name: str = ""
    code: str | None = None
    type: str = ""

    @field_validator("code", mode="before")
    @classmethod
    def code_as_str(cls, v: object) -> str | None:
        return None if v is None else str(v)


class Schedule(_MocoModel):
    id: int
    date: date
    comment: str | None = None
    am: bool | None = None
    pm: bool | None = None
    assignment: ScheduleAssignment | None = None


class AbsenceKind(str, enum.Enum):
    VACATION = "vacation"
    SICK_DAY = "sick_day"
    PUBLIC_HOLIDAY = "public_holiday"
    OTHER = "other"


class Absence(_MocoModel):
    """A schedule entry of type Absence, classified once by the client."""

    id: int
    date: date
    kind: AbsenceKind
    name: str = ""
    comment: str | None = None
    am: bool | None = None
    pm: bool | None = None
