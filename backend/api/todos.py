from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import Field, field_validator

from auth.utils import get_flowday_client
from services.flowday_client import FlowdayClient
from utils.datetime_utils import parse_iso_datetime
from utils.wire import CamelModel, required_text

router = APIRouter(prefix="/todos", tags=["todos"])


class MealInstructionRelation(CamelModel):
    meal_step_id: str
    meal_id: str
    recipe_id: str
    instruction_number: int = Field(ge=1)


class TodoRelation(CamelModel):
    meal_instruction: MealInstructionRelation


def _optional_timestamp(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    parse_iso_datetime(value)
    return value.strip()


class TodoCreateRequest(CamelModel):
    description: str = Field(min_length=1, max_length=250)
    scheduled_for: Optional[str] = None
    relations: Optional[list[TodoRelation]] = None

    @field_validator("description")
    @classmethod
    def _check_description(cls, value: str) -> str:
        return required_text(value, "Description")

    @field_validator("scheduled_for")
    @classmethod
    def _check_scheduled_for(cls, value: Optional[str]) -> Optional[str]:
        return _optional_timestamp(value)


class TodoUpdateRequest(CamelModel):
    completed: Optional[bool] = None
    description: Optional[str] = Field(default=None, min_length=1, max_length=250)
    scheduled_for: Optional[str] = None

    @field_validator("description")
    @classmethod
    def _check_description(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else required_text(value, "Description")

    @field_validator("scheduled_for")
    @classmethod
    def _check_scheduled_for(cls, value: Optional[str]) -> Optional[str]:
        return _optional_timestamp(value)


@router.get("/today")
def today_todos(client: FlowdayClient = Depends(get_flowday_client)):
    return client.today_todos()


@router.post("", status_code=201)
def create_todo(req: TodoCreateRequest, client: FlowdayClient = Depends(get_flowday_client)):
    return client.create_todo(req.to_payload())


@router.patch("/{todo_id}")
def update_todo(
    todo_id: str,
    req: TodoUpdateRequest,
    client: FlowdayClient = Depends(get_flowday_client),
):
    payload = req.to_payload()
    if not payload:
        raise HTTPException(status_code=422, detail="Nothing to update")
    return client.update_todo(todo_id, payload)


@router.delete("/{todo_id}")
def delete_todo(todo_id: str, client: FlowdayClient = Depends(get_flowday_client)):
    return client.delete_todo(todo_id)
