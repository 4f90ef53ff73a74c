from typing import Literal, Optional

from fastapi import APIRouter, Depends
from pydantic import Field, field_validator

from auth.utils import get_flowday_client
from services.flowday_client import FlowdayClient
from utils.wire import CamelModel, required_text

router = APIRouter(prefix="/food-items", tags=["food-items"])

UnitOfMeasurement = Literal[
    "Gram", "Kilogram",
    "Milliliter", "Liter", "Tablespoon", "Teaspoon",
    "Piece", "Whole",
    "Pinch", "Handful",
    "Clove", "Slice", "Strip", "Head", "Bunch",
    "To taste", "As needed",
    "Shot", "Dash", "Drop", "Splash", "Scoop", "Drizzle",
]
NutritionSource = Literal["user_measured", "package_label", "database", "estimated"]


class FoodItemCreateRequest(CamelModel):
    food_item_name: str = Field(min_length=1, max_length=100)
    category_hierarchy: Optional[list[str]] = None

    @field_validator("food_item_name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        return required_text(value, "Food item name")


class FoodItemDeleteRequest(CamelModel):
    food_item_name: str = Field(min_length=1)


class NutritionInfo(CamelModel):
    calories: float = Field(ge=0, le=10000)
    protein_in_grams: Optional[float] = Field(default=None, ge=0, le=1000)
    carbohydrates_in_grams: Optional[float] = Field(default=None, ge=0, le=1000)
    fat_in_grams: Optional[float] = Field(default=None, ge=0, le=1000)
    fiber_in_grams: Optional[float] = Field(default=None, ge=0, le=1000)
    sugar_in_grams: Optional[float] = Field(default=None, ge=0, le=1000)
    sodium_in_milligrams: Optional[float] = Field(default=None, ge=0, le=10000)


class FoodItemUnitInput(CamelModel):
    unit_of_measurement: UnitOfMeasurement
    unit_description: Optional[str] = None
    nutrition_per_of_this_unit: NutritionInfo
    source: NutritionSource


class FoodItemUnitsCreateRequest(CamelModel):
    food_item_name: str = Field(min_length=1)
    units: list[FoodItemUnitInput] = Field(min_length=1)


@router.get("")
def list_food_items(client: FlowdayClient = Depends(get_flowday_client)):
    return client.list_food_items()


@router.post("", status_code=201)
def create_food_item(
    req: FoodItemCreateRequest,
    client: FlowdayClient = Depends(get_flowday_client),
):
    payload = req.to_payload()
    categories = [c.strip() for c in (req.category_hierarchy or []) if c and c.strip()]
    if categories:
        payload["categoryHierarchy"] = categories
    else:
        payload.pop("categoryHierarchy", None)
    return client.create_food_item(payload)


@router.delete("")
def delete_food_item(
    req: FoodItemDeleteRequest,
    client: FlowdayClient = Depends(get_flowday_client),
):
    return client.delete_food_item(req.food_item_name)


@router.get("/{food_item_id}/units")
def list_food_item_units(
    food_item_id: str,
    client: FlowdayClient = Depends(get_flowday_client),
):
    return client.list_food_item_units(food_item_id)


@router.post("/{food_item_id}/units", status_code=201)
def create_food_item_units(
    food_item_id: str,
    req: FoodItemUnitsCreateRequest,
    client: FlowdayClient = Depends(get_flowday_client),
):
    return client.create_food_item_units(food_item_id, req.to_payload())
