"""Optional Numba JIT for the distance kernels.

``pip install geokriging[fast]`` enables compilation. Without Numba (or with
``NUMBA_DISABLE_JIT=1``) :func:`njit` leaves functions untouched and callers
check :data:`NUMBA_AVAILABLE` to pick their scipy path instead.
"""

import os
import warnings
from typing import Callable, Optional

_jit: Optional[Callable] = None

if os.environ.get("NUMBA_DISABLE_JIT", "0") != "1":
    try:
        from numba import njit as _jit
    except ImportError:
        warnings.warn(
            "Numba not available, distance kernels fall back to scipy. "
            "Install with: pip install geokriging[fast]",
            ImportWarning,
        )

NUMBA_AVAILABLE = _jit is not None


def njit(*args, **kwargs):
    """``numba.njit`` when available, identity decorator otherwise.

    Supports both ``@njit`` and ``@njit(cache=True)``.
    """
    if NUMBA_AVAILABLE:
        return _jit(*args, **kwargs)
    if len(args) == 1 and callable(args[0]) and not kwargs:
        return args[0]
    return lambda func: func


__all__ = ["njit", "NUMBA_AVAILABLE"]
