"""Utilities for tracing the stages of a render."""

import contextvars
from contextlib import contextmanager
import logging
from time import perf_counter
from typing import Generator


_LOGGER = logging.getLogger(__name__)

# No public API
__all__: list[str] = []


_stages: contextvars.ContextVar[tuple[str, ...]] = contextvars.ContextVar(
    "stages", default=()
)


def current_stage() -> str:
    """Return the label of the stage currently running."""
    return " > ".join(_stages.get())


@contextmanager
def trace_stage(name: str, detail: str | None = None) -> Generator[None, None, None]:
    """Log entering and leaving a render stage with its duration."""
    if detail:
        name = f"{name}({detail})"
    token = _stages.set(_stages.get() + (name,))
    label = current_stage()
    start = perf_counter()
    _LOGGER.debug("[Trace] > %s", label)
    try:
        yield
    finally:
        _LOGGER.debug("[Trace] < %s (%0.2fs)", label, perf_counter() - start)
        _stages.reset(token)
