from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Pydantic model that reads and writes the remote API's camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def required_text(value: str, label: str) -> str:
    """Strip ``value`` and reject it when nothing but whitespace remains."""
    value = value.strip()
    if not value:
        raise ValueError(f"{label} is required")
    return value
