from __future__ import annotations

import logging
from datetime import date
from typing import Any, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import Field, field_validator, model_validator

from auth.utils import AuthSession, get_current_session, get_flowday_client
from services.flowday_client import FlowdayClient
from services.habit_form import HabitFormError, MealHabitForm
from services.habit_schedule import InstructionRef
from services.submission_guard import SubmissionInProgress, habit_submission_key, habit_submissions
from utils.datetime_utils import Weekday, parse_clock_time, parse_iso_date, weekday_for_date
from utils.wire import CamelModel, required_text

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/habits", tags=["habits"])

ALREADY_SUBMITTING = "A habit for this meal is already being created"


def _optional_clock(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return str(parse_clock_time(value))


def _required_date(value: str) -> str:
    return parse_iso_date(value).isoformat()


class InstructionScheduleInput(CamelModel):
    instruction_id: str = Field(min_length=1)
    scheduled_weekday: Weekday
    scheduled_time: str

    @field_validator("scheduled_time")
    @classmethod
    def _check_time(cls, value: str) -> str:
        return str(parse_clock_time(value))


class MainEventInput(CamelModel):
    target_weekday: Weekday
    target_time: Optional[str] = None
    start_date: Optional[str] = None

    @field_validator("target_time")
    @classmethod
    def _check_time(cls, value: Optional[str]) -> Optional[str]:
        return _optional_clock(value)

    @field_validator("start_date")
    @classmethod
    def _check_date(cls, value: Optional[str]) -> Optional[str]:
        return _required_date(value) if value else None


class MealHabitRequest(MainEventInput):
    start_date: str
    customize_instructions: bool = False
    instruction_schedules: list[InstructionScheduleInput] = Field(default_factory=list)

    @field_validator("start_date")
    @classmethod
    def _check_date(cls, value: str) -> str:
        return _required_date(value)


class SimpleHabitRequest(CamelModel):
    description: str = Field(min_length=1, max_length=250)
    recurrence_type: Literal["daily", "weekly"] = "daily"
    target_weekday: Optional[Weekday] = None
    target_time: Optional[str] = None
    start_date: str

    @field_validator("description")
    @classmethod
    def _strip_description(cls, value: str) -> str:
        return required_text(value, "Description")

    @field_validator("target_time")
    @classmethod
    def _check_time(cls, value: Optional[str]) -> Optional[str]:
        return _optional_clock(value)

    @field_validator("start_date")
    @classmethod
    def _check_date(cls, value: str) -> str:
        return _required_date(value)

    @model_validator(mode="after")
    def _weekday_for_recurrence(self) -> "SimpleHabitRequest":
        if self.recurrence_type == "daily":
            self.target_weekday = None
        elif self.target_weekday is None:
            self.target_weekday = weekday_for_date(date.fromisoformat(self.start_date))
        return self


class HabitDeleteRequest(CamelModel):
    domain: Literal["meal", "simple"]
    entity_id: str = Field(min_length=1)


def _meal_instructions(meal_payload: Any) -> list[InstructionRef]:
    data = meal_payload.get("data", meal_payload) if isinstance(meal_payload, dict) else {}
    rows = data.get("instructions") if isinstance(data, dict) else None
    if not isinstance(rows, list):
        return []
    return [InstructionRef.from_meal_instruction(row) for row in rows if isinstance(row, dict)]


def _load_form(client: FlowdayClient, meal_id: str) -> MealHabitForm:
    form = MealHabitForm(meal_id=meal_id, instructions=_meal_instructions(client.get_meal(meal_id)))
    form.open()
    return form


def _apply_main_event(form: MealHabitForm, req: MainEventInput) -> None:
    form.set_main_event(
        weekday=req.target_weekday,
        time=parse_clock_time(req.target_time) if req.target_time else None,
        start_date=date.fromisoformat(req.start_date) if req.start_date else None,
        clear_time=req.target_time is None,
    )


def _schedule_rows(form: MealHabitForm) -> list[dict[str, Any]]:
    return [
        {
            "instructionId": key,
            "instructionText": schedule.instruction.text,
            "instructionNumber": schedule.instruction.instruction_number,
            "recipeId": schedule.instruction.recipe_id,
            "hasStableId": schedule.instruction.has_stable_id,
            "scheduledWeekday": schedule.weekday.value,
            "scheduledTime": str(schedule.time),
        }
        for key, schedule in form.schedules.items()
    ]


@router.post("/meal/{meal_id}/defaults")
def preview_meal_habit_defaults(
    meal_id: str,
    req: MainEventInput,
    client: FlowdayClient = Depends(get_flowday_client),
):
    try:
        form = _load_form(client, meal_id)
    except HabitFormError as e:
        raise HTTPException(status_code=422, detail=str(e))
    _apply_main_event(form, req)
    form.set_customization(True)
    return {"mealId": meal_id, "instructionSchedules": _schedule_rows(form)}


@router.post("/meal/{meal_id}", status_code=201)
def create_meal_habit(
    meal_id: str,
    req: MealHabitRequest,
    session: AuthSession = Depends(get_current_session),
    client: FlowdayClient = Depends(get_flowday_client),
):
    key = habit_submission_key(session.user_id, meal_id)
    if habit_submissions.is_active(key):
        raise HTTPException(status_code=409, detail=ALREADY_SUBMITTING)

    try:
        form = _load_form(client, meal_id)
        _apply_main_event(form, req)
        if req.customize_instructions:
            form.set_customization(True)
            for row in req.instruction_schedules:
                form.edit_instruction(
                    row.instruction_id,
                    weekday=row.scheduled_weekday,
                    time=parse_clock_time(row.scheduled_time),
                )
    except HabitFormError as e:
        raise HTTPException(status_code=422, detail=str(e))

    try:
        with habit_submissions.hold(key):
            result = form.submit(lambda request: client.create_habit_batch(request.to_payload()))
    except SubmissionInProgress:
        raise HTTPException(status_code=409, detail=ALREADY_SUBMITTING)

    logger.info("Created weekly habit for meal %s (user %s)", meal_id, session.user_id)
    return result


@router.post("/simple", status_code=201)
def create_simple_habit(
    req: SimpleHabitRequest,
    client: FlowdayClient = Depends(get_flowday_client),
):
    return client.create_simple_habit(req.to_payload())


@router.delete("")
def delete_habit(
    req: HabitDeleteRequest,
    client: FlowdayClient = Depends(get_flowday_client),
):
    return client.delete_habit(req.to_payload())
