from typing import Literal, Optional

from fastapi import APIRouter, Depends
from pydantic import Field

from auth.utils import get_flowday_client
from services.flowday_client import FlowdayClient
from utils.wire import CamelModel

router = APIRouter(prefix="/recipes", tags=["recipes"])

MealTiming = Literal["BREAKFAST", "LUNCH", "DINNER", "SNACK"]


class RecipeFields(CamelModel):
    name_of_the_recipe: str = Field(min_length=1, max_length=75)
    general_description_of_the_recipe: Optional[str] = Field(default=None, max_length=250)
    when_is_it_consumed: Optional[list[MealTiming]] = None


class IngredientInput(CamelModel):
    ingredient_text: str = Field(min_length=1)


class IngredientsRequest(CamelModel):
    ingredients: list[IngredientInput] = Field(min_length=1)


class FoodItemUnitUsage(CamelModel):
    food_item_unit_id: str
    food_item_id: Optional[str] = None
    quantity_of_food_item_unit: float = Field(gt=0, le=1_000_000)


class InstructionInput(CamelModel):
    step_instruction: str = Field(min_length=1)
    food_item_units_used_in_step: Optional[list[FoodItemUnitUsage]] = None


class NumberedInstructionInput(InstructionInput):
    instruction_number: int = Field(ge=1)


class InstructionsCreateRequest(CamelModel):
    step_by_step_instructions: list[InstructionInput] = Field(min_length=1)


class InstructionsUpdateRequest(CamelModel):
    step_by_step_instructions: list[NumberedInstructionInput] = Field(min_length=1)


def _with_recipe_id(recipe_id: str, model: CamelModel) -> dict:
    return {"recipeId": recipe_id, **model.to_payload()}


@router.get("")
def list_recipes(client: FlowdayClient = Depends(get_flowday_client)):
    return client.list_recipes()


@router.get("/{recipe_id}")
def get_recipe(recipe_id: str, client: FlowdayClient = Depends(get_flowday_client)):
    return client.get_recipe(recipe_id)


@router.post("", status_code=201)
def create_recipe(req: RecipeFields, client: FlowdayClient = Depends(get_flowday_client)):
    return client.create_recipe(req.to_payload())


@router.patch("/{recipe_id}")
def update_recipe(
    recipe_id: str,
    req: RecipeFields,
    client: FlowdayClient = Depends(get_flowday_client),
):
    return client.update_recipe(_with_recipe_id(recipe_id, req))


@router.delete("/{recipe_id}")
def delete_recipe(recipe_id: str, client: FlowdayClient = Depends(get_flowday_client)):
    return client.delete_recipe(recipe_id)


@router.post("/{recipe_id}/ingredients", status_code=201)
def add_ingredients(
    recipe_id: str,
    req: IngredientsRequest,
    client: FlowdayClient = Depends(get_flowday_client),
):
    return client.create_recipe_ingredients(_with_recipe_id(recipe_id, req))


@router.post("/{recipe_id}/instructions", status_code=201)
def add_instructions(
    recipe_id: str,
    req: InstructionsCreateRequest,
    client: FlowdayClient = Depends(get_flowday_client),
):
    return client.create_recipe_instructions(_with_recipe_id(recipe_id, req))


@router.patch("/{recipe_id}/instructions")
def update_instructions(
    recipe_id: str,
    req: InstructionsUpdateRequest,
    client: FlowdayClient = Depends(get_flowday_client),
):
    return client.update_recipe_instructions(_with_recipe_id(recipe_id, req))
