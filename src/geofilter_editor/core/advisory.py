"""User-facing, non-fatal advisories raised by the editor engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .models import FilterSlot


class AdvisoryKind(str, Enum):
    """Category of an advisory."""

    BIAS_DROPPED = "bias_dropped"
    SHAPE_NOT_CONFIGURED = "shape_not_configured"
    NO_SHAPE_TYPE = "no_shape_type"
    DRAWING_IN_PROGRESS = "drawing_in_progress"
    QUERY_REQUIRED = "query_required"


@dataclass(frozen=True)
class Advisory:
    """
    A recoverable condition the user should be told about.

    Attributes:
        kind: Advisory category
        message: Text shown to the user
        slot: Slot the advisory concerns, if any
        blocking: True if the action that raised it did not happen
    """

    kind: AdvisoryKind
    message: str
    slot: Optional[FilterSlot] = None
    blocking: bool = True


def bias_dropped() -> Advisory:
    return Advisory(
        AdvisoryKind.BIAS_DROPPED,
        "Both locationBias and locationRestriction were provided - dropping "
        "locationBias and keeping locationRestriction (APIs expect at most one).",
        slot=FilterSlot.BIAS,
        blocking=False,
    )


def shape_not_configured(slot: FilterSlot) -> Advisory:
    return Advisory(
        AdvisoryKind.SHAPE_NOT_CONFIGURED,
        f"{slot.display_name} is enabled but its values are not set. "
        "Please enter coordinates or draw on the map.",
        slot=slot,
    )


def no_shape_type(slot: FilterSlot) -> Advisory:
    return Advisory(
        AdvisoryKind.NO_SHAPE_TYPE,
        "Please select a shape type (circle or rectangle) before drawing.",
        slot=slot,
    )


def drawing_in_progress(slot: FilterSlot, active: FilterSlot) -> Advisory:
    return Advisory(
        AdvisoryKind.DRAWING_IN_PROGRESS,
        f"{active.display_name} is currently being drawn. "
        f"Stop drawing it before drawing {slot.display_name}.",
        slot=slot,
    )


def query_required() -> Advisory:
    return Advisory(AdvisoryKind.QUERY_REQUIRED, "Input is required.")
