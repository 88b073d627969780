"""Runner for best-effort writes that follow a committed reservation."""

from collections.abc import Callable
from typing import Any

from marketplace.models.reservation import SideEffectOutcome
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


def run_best_effort(
    name: str,
    fn: Callable[..., Any],
    *args: Any,
    **kwargs: Any,
) -> SideEffectOutcome:
    """Run ``fn`` and report the outcome instead of raising.

    A return value of ``False`` is reported as skipped.
    """
    try:
        result = fn(*args, **kwargs)
    except Exception as e:
        logger.warning("Side effect %s failed: %s", name, e, exc_info=True)
        return SideEffectOutcome(name=name, ok=False, error=str(e) or type(e).__name__)

    if result is False:
        return SideEffectOutcome(name=name, ok=True, skipped=True)
    return SideEffectOutcome(name=name, ok=True)
