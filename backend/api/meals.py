from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import Field, field_validator

from auth.utils import get_flowday_client
from services.flowday_client import FlowdayClient
from utils.wire import CamelModel, required_text

router = APIRouter(prefix="/meals", tags=["meals"])


class MealCreateRequest(CamelModel):
    meal_name: str = Field(min_length=1, max_length=100)

    @field_validator("meal_name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        return required_text(value, "Meal name")


class AttachRecipesRequest(CamelModel):
    recipe_ids: list[UUID] = Field(min_length=1)


@router.get("")
def list_meals(client: FlowdayClient = Depends(get_flowday_client)):
    return client.list_meals()


@router.get("/{meal_id}")
def get_meal(meal_id: str, client: FlowdayClient = Depends(get_flowday_client)):
    return client.get_meal(meal_id)


@router.post("", status_code=201)
def create_meal(req: MealCreateRequest, client: FlowdayClient = Depends(get_flowday_client)):
    return client.create_meal(req.to_payload())


@router.post("/{meal_id}/recipes", status_code=201)
def attach_recipes(
    meal_id: str,
    req: AttachRecipesRequest,
    client: FlowdayClient = Depends(get_flowday_client),
):
    return client.attach_recipes(meal_id, req.to_payload())
