"""Numerical validity checks and the termination flag.

A termination flag is a plain bool where True means the current integrator
call has left the numerically valid region. Flags only ever go from False to
True within one call.
"""

from typing import Any, Callable

import torch


def is_valid(v) -> bool:
    """True iff every component of v is finite (no NaN, no ±inf)."""
    return bool(torch.isfinite(torch.as_tensor(v)).all())


def termination(v=None, terminated: bool = False) -> bool:
    """Termination flag for a vector, or pass through an explicit flag."""
    if v is None:
        return bool(terminated)
    return not is_valid(v)


def is_terminated(t: bool) -> bool:
    return bool(t)


def combine(t1: bool, t2: bool) -> bool:
    """Combine two flags. Once terminated, stays terminated."""
    return bool(t1) or bool(t2)


def value_termination(fn: Callable[..., Any], *args) -> tuple[Any, bool]:
    """Evaluate fn(*args) and return (result, termination(result))."""
    res = fn(*args)
    return res, termination(res)
