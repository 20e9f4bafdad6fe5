"""At most one of bias and restriction is sent downstream."""

from __future__ import annotations

import logging
from typing import Callable, Optional, Tuple

from .advisory import Advisory, bias_dropped
from .models import ShapeFilter

logger = logging.getLogger(__name__)


def compute_effective_request(
    bias: ShapeFilter,
    restriction: ShapeFilter,
    on_advisory: Optional[Callable[[Advisory], None]] = None
) -> Tuple[ShapeFilter, ShapeFilter]:
    """
    Derive the outgoing (bias, restriction) pair.

    When both are set the bias is dropped and the restriction kept. The
    inputs are returned untouched otherwise. Stored slot values are never
    modified.

    Args:
        bias: Current bias value
        restriction: Current restriction value
        on_advisory: Called with a non-blocking advisory when the bias is dropped

    Returns:
        Tuple of (effective_bias, effective_restriction)
    """
    if bias is not None and restriction is not None:
        advisory = bias_dropped()
        logger.warning(advisory.message)
        if on_advisory is not None:
            on_advisory(advisory)
        return None, restriction
    return bias, restriction
