"""
Reader and CLI logging through Loguru, gated by the bound verbosity.

LOG() checks the verbosity of whatever state is bound to the current
context, so callers never pass state around. Reader and scanner
code log through it freely; with no state bound to the context they stay silent.

Usage:
    from sharpbang.lib.log import LOG, state_connectToLogger

    # At start of pipeline function:
    state_connectToLogger(state)

    # Anywhere in that context:
    LOG("Read 3 directives", level=1)
    LOG("Directive at 1:0 -> (mode: scheme)", level=2)
    LOG("scanner: skipping -> reading_datum at 1:3", level=3)
"""

from loguru import logger
from typing import Any, Optional
from contextvars import ContextVar
import sys

# State bound by state_connectToLogger()
_program_state: ContextVar[Optional[Any]] = ContextVar('program_state', default=None)

logger_format = (
    "<green>{time:HH:mm:ss}</green> │ "
    "<level>{level: <5}</level> │ "
    "<cyan>{function: <20}</cyan> @ "
    "<cyan>{line: <4}</cyan> ║ "
    "<level>{message}</level>"
)

logger.remove()
logger.add(sys.stderr, format=logger_format, level="DEBUG")


def state_connectToLogger(state: Any) -> None:
    """
    Bind a verbosity-carrying state to the current logging context.

    Args:
        state: Any object with a verbosity attribute, or None to disconnect
    """
    _program_state.set(state)


def verbosity_get() -> int:
    """Verbosity of the state bound to this context, 0 if none"""
    state = _program_state.get()
    return getattr(state, 'verbosity', 0) if state is not None else 0


def LOG(message: str, level: int = 1, **kwargs: Any) -> None:
    """
    Emit message when the bound verbosity is at least level.

    Args:
        message: Text to log
        level: Minimum verbosity level required (1=normal, 2=verbose, 3=trace)
        **kwargs: Additional loguru metadata

    Example:
        LOG("Parsed 12 forms", level=1)
        LOG("Directive at 3:0 -> (vim: set ft=scheme :)", level=2)
    """
    if verbosity_get() >= level:
        logger.opt(depth=1).debug(message, **kwargs)
