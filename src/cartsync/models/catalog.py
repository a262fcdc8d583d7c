"""Catalog availability model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Availability(BaseModel):
    """How many units of an item the catalog can currently sell.

    The remote API sends camelCase keys (``itemId``, ``availableQuantity``).
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    item_id: str
    available_quantity: int = Field(..., ge=0)
