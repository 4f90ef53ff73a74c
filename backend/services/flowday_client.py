from __future__ import annotations

import ipaddress
import logging
from typing import Any

import httpx

from config import settings

logger = logging.getLogger(__name__)

_LOCAL_HOSTNAMES = {"localhost", "127.0.0.1", "::1"}
_PRIVATE_V4_NETWORKS = (
    ipaddress.ip_network("10.0.0.0/8"),
    ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"),
)

NETWORK_ERROR_MESSAGE = "Unable to reach the Flowday API. Please try again."


class FlowdayAPIError(Exception):
    """The remote API answered with a non-2xx status."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class FlowdayNetworkError(FlowdayAPIError):
    """The remote API could not be reached at all."""

    def __init__(self, message: str = NETWORK_ERROR_MESSAGE):
        super().__init__(502, message)


def is_local_hostname(hostname: str) -> bool:
    host = (hostname or "").strip().strip("[]").lower()
    if host in _LOCAL_HOSTNAMES:
        return True
    try:
        addr = ipaddress.ip_address(host)
    except ValueError:
        return False
    if addr.version != 4:
        return False
    return any(addr in network for network in _PRIVATE_V4_NETWORKS)


def resolve_api_base_url(hostname: str | None = None) -> str:
    if settings.FLOWDAY_API_URL:
        return settings.FLOWDAY_API_URL.rstrip("/")
    if hostname:
        if is_local_hostname(hostname):
            host = hostname if ":" not in hostname or hostname.startswith("[") else f"[{hostname}]"
            return f"http://{host}:{settings.FLOWDAY_API_LOCAL_PORT}"
        return settings.FLOWDAY_API_PROD_URL.rstrip("/")
    return f"http://localhost:{settings.FLOWDAY_API_LOCAL_PORT}"


def error_message_from_response(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    message = body.get("message") or body.get("error")
    if message:
        return str(message)
    return f"HTTP error! status: {response.status_code}"


class FlowdayClient:
    """Thin wrapper over the remote Flowday REST API, one instance per request."""

    def __init__(
        self,
        token: str | None,
        base_url: str | None = None,
        transport: httpx.BaseTransport | None = None,
        timeout: float | None = None,
    ):
        headers = {"Content-Type": "application/json", "User-Agent": "FlowdayBackend/1.0"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.Client(
            base_url=base_url or resolve_api_base_url(),
            headers=headers,
            timeout=timeout if timeout is not None else settings.FLOWDAY_API_TIMEOUT_SECONDS,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "FlowdayClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(self, method: str, path: str, json: Any = None) -> Any:
        try:
            # httpx only accepts a JSON body on DELETE through .request()
            response = self._client.request(method, path, json=json)
        except httpx.HTTPError as exc:
            logger.warning("Flowday API %s %s unreachable: %s", method, path, exc)
            raise FlowdayNetworkError() from exc

        if response.is_error:
            message = error_message_from_response(response)
            logger.warning("Flowday API %s %s failed (%s): %s", method, path, response.status_code, message)
            raise FlowdayAPIError(response.status_code, message)

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise FlowdayAPIError(502, "Flowday API returned a non-JSON response") from exc

    # Food items

    def list_food_items(self) -> Any:
        return self._request("GET", "/api/food-item")

    def create_food_item(self, payload: dict[str, Any]) -> Any:
        return self._request("POST", "/api/food-item", json=payload)

    def delete_food_item(self, food_item_name: str) -> Any:
        return self._request("DELETE", "/api/food-item", json={"foodItemName": food_item_name})

    def list_food_item_units(self, food_item_id: str) -> Any:
        return self._request("GET", f"/api/food-item/{food_item_id}/units")

    def create_food_item_units(self, food_item_id: str, payload: dict[str, Any]) -> Any:
        return self._request("POST", f"/api/food-item/{food_item_id}/units", json=payload)

    # Recipes

    def list_recipes(self) -> Any:
        return self._request("GET", "/api/recipe")

    def get_recipe(self, recipe_id: str) -> Any:
        return self._request("GET", f"/api/recipe/{recipe_id}")

    def create_recipe(self, payload: dict[str, Any]) -> Any:
        return self._request("POST", "/api/recipe", json=payload)

    def update_recipe(self, payload: dict[str, Any]) -> Any:
        return self._request("PATCH", "/api/recipe", json=payload)

    def delete_recipe(self, recipe_id: str) -> Any:
        return self._request("DELETE", "/api/recipe", json={"recipeId": recipe_id})

    def create_recipe_ingredients(self, payload: dict[str, Any]) -> Any:
        return self._request("POST", "/api/recipe/ingredients", json=payload)

    def create_recipe_instructions(self, payload: dict[str, Any]) -> Any:
        return self._request("POST", "/api/recipe/instructions", json=payload)

    def update_recipe_instructions(self, payload: dict[str, Any]) -> Any:
        return self._request("PATCH", "/api/recipe/instructions", json=payload)

    # Meals

    def list_meals(self) -> Any:
        return self._request("GET", "/api/meal")

    def get_meal(self, meal_id: str) -> Any:
        return self._request("GET", f"/api/meal/{meal_id}")

    def create_meal(self, payload: dict[str, Any]) -> Any:
        return self._request("POST", "/api/meal", json=payload)

    def attach_recipes(self, meal_id: str, payload: dict[str, Any]) -> Any:
        return self._request("POST", f"/api/meal/{meal_id}/recipes", json=payload)

    # Todos

    def today_todos(self) -> Any:
        return self._request("GET", "/api/todo/today")

    def create_todo(self, payload: dict[str, Any]) -> Any:
        return self._request("POST", "/api/todo", json=payload)

    def update_todo(self, todo_id: str, payload: dict[str, Any]) -> Any:
        return self._request("PATCH", f"/api/todo/{todo_id}", json=payload)

    def delete_todo(self, todo_id: str) -> Any:
        return self._request("DELETE", f"/api/todo/{todo_id}")

    # Habits

    def create_habit_batch(self, payload: dict[str, Any]) -> Any:
        return self._request("POST", "/api/habit/batch", json=payload)

    def create_simple_habit(self, payload: dict[str, Any]) -> Any:
        return self._request("POST", "/api/habit/simple", json=payload)

    def delete_habit(self, payload: dict[str, Any]) -> Any:
        return self._request("DELETE", "/api/habit", json=payload)
