"""Normalization of weekly meal habits into a batch request.

A meal habit has one main event (e.g. "eat dinner on Wednesday at 18:00")
and one sub-entity per recipe instruction, each a prep task scheduled
relative to the main event. The remote API requires at least one
sub-entity; a sub-entity without ``subEntityId`` asks the remote side to
auto-configure every instruction with its own defaults.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from typing import Any, Callable, Iterable, Literal, Sequence, Union

from pydantic import Field

from config import settings
from utils.datetime_utils import (
    ClockTime,
    Weekday,
    coerce_clock_time,
    offset_earlier,
    parse_clock_time,
)
from utils.wire import CamelModel


def default_main_event_time() -> ClockTime:
    return parse_clock_time(settings.HABIT_DEFAULT_TIME)


def default_prep_time(main_time: ClockTime | str | None) -> ClockTime:
    """Prep time used when the user has not picked one: shortly before the main event."""
    base = coerce_clock_time(main_time, default_main_event_time())
    return offset_earlier(base, settings.HABIT_PREP_OFFSET_MINUTES)


@dataclass(frozen=True)
class InstructionRef:
    recipe_id: str
    instruction_number: int
    instruction_id: str | None = None
    text: str = ""

    @property
    def key(self) -> str:
        if self.instruction_id:
            return self.instruction_id
        return f"{self.recipe_id}-{self.instruction_number}"

    @property
    def has_stable_id(self) -> bool:
        return bool(self.instruction_id)

    @classmethod
    def from_meal_instruction(cls, payload: dict[str, Any]) -> "InstructionRef":
        return cls(
            recipe_id=str(payload.get("recipeId") or ""),
            instruction_number=int(payload.get("instructionNumber") or 0),
            instruction_id=str(payload["id"]) if payload.get("id") else None,
            text=str(payload.get("instruction") or ""),
        )


@dataclass(frozen=True)
class MainEventSchedule:
    weekday: Weekday
    start_date: date
    time: ClockTime | None = None


@dataclass(frozen=True)
class InstructionSchedule:
    instruction: InstructionRef
    weekday: Weekday
    time: ClockTime

    def edited(self, weekday: Weekday | None = None, time: ClockTime | None = None) -> "InstructionSchedule":
        return replace(
            self,
            weekday=weekday if weekday is not None else self.weekday,
            time=time if time is not None else self.time,
        )


class HabitSubEntity(CamelModel):
    sub_entity_id: str | None = None
    scheduled_weekday: Weekday
    scheduled_time: str | None = None


class HabitBatchRequest(CamelModel):
    domain: Literal["meal"] = "meal"
    entity_id: str = Field(min_length=1)
    recurrence_type: Literal["weekly"] = "weekly"
    target_weekday: Weekday
    target_time: str | None = None
    start_date: date
    sub_entities: list[HabitSubEntity] = Field(min_length=1)


@dataclass(frozen=True)
class AutoConfigure:
    """Let the remote API pick defaults for every instruction."""


@dataclass(frozen=True)
class CustomSchedule:
    entries: tuple[HabitSubEntity, ...]


SubEntityResolution = Union[AutoConfigure, CustomSchedule]


def generate_defaults(
    instructions: Sequence[InstructionRef],
    main_event: MainEventSchedule,
) -> list[InstructionSchedule]:
    prep_time = default_prep_time(main_event.time)
    return [
        InstructionSchedule(instruction=instruction, weekday=main_event.weekday, time=prep_time)
        for instruction in instructions
    ]


def _stable(instruction: InstructionRef) -> bool:
    return instruction.has_stable_id


def resolve_sub_entities(
    customization_enabled: bool,
    edited: Iterable[InstructionSchedule],
    has_stable_id: Callable[[InstructionRef], bool] = _stable,
) -> SubEntityResolution:
    # All-or-nothing: rows without a durable id are dropped, and only an
    # empty remainder falls back to auto-configuration.
    if not customization_enabled:
        return AutoConfigure()
    entries = tuple(
        HabitSubEntity(
            sub_entity_id=schedule.instruction.key,
            scheduled_weekday=schedule.weekday,
            scheduled_time=str(schedule.time),
        )
        for schedule in edited
        if has_stable_id(schedule.instruction)
    )
    if not entries:
        return AutoConfigure()
    return CustomSchedule(entries=entries)


def assemble(
    meal_id: str,
    main_event: MainEventSchedule,
    resolution: SubEntityResolution,
) -> HabitBatchRequest:
    if isinstance(resolution, AutoConfigure):
        sub_entities = [
            HabitSubEntity(
                scheduled_weekday=main_event.weekday,
                scheduled_time=str(default_prep_time(main_event.time)),
            )
        ]
    elif isinstance(resolution, CustomSchedule):
        sub_entities = list(resolution.entries)
    else:
        raise TypeError(f"Unsupported sub-entity resolution: {resolution!r}")

    return HabitBatchRequest(
        entity_id=meal_id,
        target_weekday=main_event.weekday,
        target_time=str(main_event.time) if main_event.time is not None else None,
        start_date=main_event.start_date,
        sub_entities=sub_entities,
    )
