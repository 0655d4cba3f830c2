"""Trigger and action specs the capability registry hands to callers."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class _Spec(BaseModel):
    model_config = ConfigDict(frozen=True)


class StateEqualsSpec(_Spec):
    """Trigger when the entity's state equals one of *options*."""

    type: Literal["state_equals"] = "state_equals"
    label: str
    options: tuple[str, ...]


class AttributeDeltaSpec(_Spec):
    """Trigger when *attribute* rises or falls."""

    type: Literal["attribute_delta"] = "attribute_delta"
    label: str
    attribute: str
    direction_options: tuple[Literal["increased", "decreased"], ...] = ("increased", "decreased")


class PositionEqualsSpec(_Spec):
    """Trigger when *attribute* reaches one of the named waypoints."""

    type: Literal["position_equals"] = "position_equals"
    label: str
    attribute: str
    waypoints: dict[int, str]


TriggerSpec = Annotated[
    StateEqualsSpec | AttributeDeltaSpec | PositionEqualsSpec, Field(discriminator="type")
]


class CommandSpec(_Spec):
    """A parameterless action, e.g. toggle."""

    kind: Literal["command"] = "command"
    id: str
    label: str


class SliderSpec(_Spec):
    """A numeric action over ``min..max``."""

    kind: Literal["slider"] = "slider"
    id: str
    label: str
    min: float
    max: float
    step: float = 1


class FixedPositionSpec(_Spec):
    """A numeric action restricted to named positions."""

    kind: Literal["fixed-position"] = "fixed-position"
    id: str
    label: str
    positions: dict[int, str]


ActionSpec = Annotated[CommandSpec | SliderSpec | FixedPositionSpec, Field(discriminator="kind")]
