from __future__ import annotations

import logging
from datetime import date
from enum import Enum
from typing import Callable, Mapping, Sequence, TypeVar

from services.habit_schedule import (
    HabitBatchRequest,
    InstructionRef,
    InstructionSchedule,
    MainEventSchedule,
    assemble,
    default_main_event_time,
    generate_defaults,
    resolve_sub_entities,
)
from utils.datetime_utils import ClockTime, Weekday

logger = logging.getLogger(__name__)

T = TypeVar("T")


class HabitFormError(Exception):
    """Raised for edits or submissions the habit form cannot accept."""


class FormState(str, Enum):
    IDLE = "idle"
    EDITING = "editing"
    SUBMITTING = "submitting"


class MealHabitForm:
    """One habit-creation form session for a single meal.

    Per-instruction schedules are kept in an ordered mapping keyed by
    instruction key and rebuilt on every edit, so row order always matches
    the meal's instruction order.
    """

    def __init__(
        self,
        meal_id: str,
        instructions: Sequence[InstructionRef],
        today: date | None = None,
    ):
        self.meal_id = meal_id
        self.instructions = tuple(instructions)
        seen: set[str] = set()
        for instruction in self.instructions:
            if instruction.key in seen:
                raise HabitFormError(f"Duplicate instruction in meal {meal_id}: {instruction.key}")
            seen.add(instruction.key)
        self._today = today or date.today()
        self.state = FormState.IDLE
        self.customization_enabled = False
        self.main_event = self._initial_main_event()
        self._schedules: dict[str, InstructionSchedule] = {}

    def _initial_main_event(self) -> MainEventSchedule:
        return MainEventSchedule(
            weekday=Weekday.SUNDAY,
            start_date=self._today,
            time=default_main_event_time(),
        )

    @property
    def schedules(self) -> Mapping[str, InstructionSchedule]:
        return dict(self._schedules)

    def open(self) -> None:
        if self.state == FormState.IDLE:
            self.state = FormState.EDITING

    def _require_editable(self) -> None:
        if self.state == FormState.SUBMITTING:
            raise HabitFormError("Habit is being submitted")
        self.open()

    def set_main_event(
        self,
        weekday: Weekday | None = None,
        time: ClockTime | None = None,
        start_date: date | None = None,
        clear_time: bool = False,
    ) -> None:
        self._require_editable()
        self.main_event = MainEventSchedule(
            weekday=weekday or self.main_event.weekday,
            start_date=start_date or self.main_event.start_date,
            time=None if clear_time else (time or self.main_event.time),
        )

    def set_customization(self, enabled: bool) -> None:
        self._require_editable()
        if enabled and not self.customization_enabled:
            defaults = generate_defaults(self.instructions, self.main_event)
            self._schedules = {s.instruction.key: s for s in defaults}
        elif not enabled:
            self._schedules = {}
        self.customization_enabled = enabled

    def edit_instruction(
        self,
        key: str,
        weekday: Weekday | None = None,
        time: ClockTime | None = None,
    ) -> InstructionSchedule:
        self._require_editable()
        if not self.customization_enabled:
            raise HabitFormError("Enable prep task customization before editing steps")
        current = self._schedules.get(key)
        if current is None:
            raise HabitFormError(f"Unknown instruction: {key}")
        updated = current.edited(weekday=weekday, time=time)
        self._schedules = {k: (updated if k == key else s) for k, s in self._schedules.items()}
        return updated

    def build_request(self) -> HabitBatchRequest:
        resolution = resolve_sub_entities(
            self.customization_enabled,
            list(self._schedules.values()),
        )
        return assemble(self.meal_id, self.main_event, resolution)

    def reset(self) -> None:
        self.state = FormState.IDLE
        self.customization_enabled = False
        self.main_event = self._initial_main_event()
        self._schedules = {}

    def submit(self, send: Callable[[HabitBatchRequest], T]) -> T:
        if self.state == FormState.SUBMITTING:
            raise HabitFormError("Habit submission already in progress")
        request = self.build_request()
        self.state = FormState.SUBMITTING
        try:
            result = send(request)
        except Exception:
            logger.warning("Habit submission failed for meal %s; keeping form values", self.meal_id)
            self.state = FormState.EDITING
            raise
        self.reset()
        return result
