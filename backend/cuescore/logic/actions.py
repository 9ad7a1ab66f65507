"""Validated payloads for engine custom actions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from cuescore.logic.exceptions import InvalidActionError
from cuescore.logic.state import MAX_PINS

if TYPE_CHECKING:
    from collections.abc import Mapping

ModelT = TypeVar("ModelT", bound=BaseModel)


class WinSetData(BaseModel):
    model_config = ConfigDict(frozen=True)

    player_id: str


class AddPinsData(BaseModel):
    model_config = ConfigDict(frozen=True)

    pins: int = Field(ge=0, le=MAX_PINS)


class PlayerOrderChangeData(BaseModel):
    model_config = ConfigDict(frozen=True)

    selected_player_id: str


class SetMultiplierData(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: int


class ApplyDeductionData(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: int = Field(ge=0)


def parse_action_data(model: type[ModelT], data: Mapping[str, Any] | None) -> ModelT:
    """
    Validate a raw action payload into its model.

    Raises:
        InvalidActionError: If the payload is missing fields or has bad values

    """
    try:
        return model.model_validate(dict(data or {}))
    except ValidationError as e:
        fields = ", ".join(".".join(str(part) for part in err["loc"]) for err in e.errors())
        raise InvalidActionError(f"invalid {model.__name__} payload: {fields}") from e
