"""Tolerance presets for domain checks on knot vectors."""

from functools import cache
from typing import Any, NamedTuple, cast

import numpy as np
from numpy import typing as npt


@cache
def _ensure_float_dtype_by_name(name: str) -> np.dtype[np.floating[Any]]:
    """Cached validator returning a supported floating dtype from its canonical name.

    Args:
        name (str): Canonical NumPy dtype name (e.g., "float64").

    Returns:
        np.dtype[np.floating[Any]]: Validated floating-point dtype.

    Raises:
        ValueError: If dtype is neither float32 nor float64.
    """
    dtype_obj = np.dtype(name)
    if dtype_obj.type not in (np.float32, np.float64):
        raise ValueError(f"Unsupported dtype: {name}")
    return cast(np.dtype[np.floating[Any]], dtype_obj)


def ensure_float_dtype(dtype: npt.DTypeLike) -> np.dtype[np.floating[Any]]:
    """Normalize and validate a dtype-like into float32 or float64."""
    return _ensure_float_dtype_by_name(np.dtype(dtype).name)


class _TolerancePreset(NamedTuple):
    float32: float
    float64: float


_TOLERANCE_PRESETS = {
    "default": _TolerancePreset(1e-6, 1e-12),
    "strict": _TolerancePreset(1e-7, 1e-15),
    "conservative": _TolerancePreset(1e-5, 1e-10),
}


def _get_tolerance(dtype: npt.DTypeLike, preset: _TolerancePreset) -> float:
    dtype_obj = ensure_float_dtype(dtype)
    return preset.float32 if dtype_obj.type == np.float32 else preset.float64


def get_default_tolerance(dtype: npt.DTypeLike) -> float:
    """Get a reasonable default tolerance for floating-point comparisons.

    Args:
        dtype (npt.DTypeLike): NumPy floating-point data type.

    Returns:
        float: Recommended tolerance value for the given dtype.

    Raises:
        ValueError: If dtype is not float32 or float64.

    Example:
        >>> get_default_tolerance(np.float32)
        1e-06
        >>> get_default_tolerance("float64")
        1e-12
    """
    return _get_tolerance(dtype, _TOLERANCE_PRESETS["default"])


def get_strict_tolerance(dtype: npt.DTypeLike) -> float:
    """Get the tolerance used by knot vectors to decide domain membership.

    Args:
        dtype (npt.DTypeLike): NumPy floating-point data type.

    Returns:
        float: Strict tolerance value for the given dtype.

    Raises:
        ValueError: If dtype is not float32 or float64.
    """
    return _get_tolerance(dtype, _TOLERANCE_PRESETS["strict"])


def get_conservative_tolerance(dtype: npt.DTypeLike) -> float:
    """Get a conservative tolerance, for comparisons where robustness matters most.

    Args:
        dtype (npt.DTypeLike): NumPy floating-point data type.

    Returns:
        float: Conservative tolerance value for the given dtype.

    Raises:
        ValueError: If dtype is not float32 or float64.
    """
    return _get_tolerance(dtype, _TOLERANCE_PRESETS["conservative"])


def get_machine_epsilon(dtype: npt.DTypeLike) -> float:
    """Get machine epsilon for a given floating-point dtype.

    Args:
        dtype (npt.DTypeLike): NumPy floating-point data type.

    Returns:
        float: Machine epsilon for the given dtype.

    Raises:
        ValueError: If dtype is not float32 or float64.
    """
    return float(np.finfo(ensure_float_dtype(dtype)).eps)


def resolve_tolerance(tolerance: float | None, dtype: npt.DTypeLike) -> float:
    """Return `tolerance`, or the strict preset for `dtype` when it is None.

    Raises:
        ValueError: If the tolerance is not a positive finite number.
    """
    if tolerance is None:
        return get_strict_tolerance(dtype)
    tol = float(tolerance)
    if not np.isfinite(tol) or tol <= 0.0:
        raise ValueError(f"tolerance must be positive, got {tolerance}")
    return tol
