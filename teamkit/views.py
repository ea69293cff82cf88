"""Subviews and reshapes of row-major arrays that share memory with their source."""

from __future__ import annotations

import numpy as np

_MAX_RANK = 6


def _check_view(view: np.ndarray) -> np.ndarray:
    if view is None:
        raise ValueError("view holds no data")
    arr = view if isinstance(view, np.ndarray) else np.asarray(view)
    if not 1 <= arr.ndim <= _MAX_RANK:
        raise ValueError(f"views of rank 1 to {_MAX_RANK} are supported, got rank {arr.ndim}")
    return arr


def _check_index(arr: np.ndarray, dim: int, index: int) -> None:
    if not 0 <= index < arr.shape[dim]:
        raise IndexError(
            f"index {index} out of range for dimension {dim} of extent {arr.shape[dim]}"
        )


def subview(view: np.ndarray, *args: int) -> np.ndarray:
    """Fix the leading indices of ``view`` and return the remaining block.

    A rank-1 view takes one index and gives a rank-0 view of that entry; a
    view of rank ``r > 1`` takes between 1 and ``r - 1`` indices. The result
    shares memory with ``view``.
    """
    arr = _check_view(view)
    max_indices = 1 if arr.ndim == 1 else arr.ndim - 1
    if not 1 <= len(args) <= max_indices:
        raise ValueError(
            f"a rank-{arr.ndim} view takes 1 to {max_indices} indices, got {len(args)}"
        )
    for dim, index in enumerate(args):
        _check_index(arr, dim, index)
    return arr[tuple(args) + (Ellipsis,)]


def subview_range(view: np.ndarray, bounds: tuple[int, int], dim: int = 0) -> np.ndarray:
    """Return the entries of ``view`` whose index along ``dim`` lies in ``[first, second)``.

    The result keeps the rank of ``view`` and shares memory with it. For
    views of rank above 1, ``second`` must be below the extent of ``dim``.
    """
    arr = _check_view(view)
    first, second = bounds
    if arr.ndim == 1:
        if dim != 0:
            raise ValueError("a rank-1 view can only be sliced along dimension 0")
    elif not 0 <= dim < arr.ndim:
        raise ValueError(f"dimension {dim} out of range for a rank-{arr.ndim} view")
    if not (first >= 0 and first < second):
        raise IndexError(f"invalid range [{first}, {second})")
    if arr.ndim > 1 and not second < arr.shape[dim]:
        raise IndexError(
            f"range end {second} must be below the extent {arr.shape[dim]} of dimension {dim}"
        )
    index = [slice(None)] * arr.ndim
    index[dim] = slice(first, second)
    return arr[tuple(index)]


def subview_1(view: np.ndarray, i1: int) -> np.ndarray:
    """Fix the second index of ``view`` and return the rest, sharing memory."""
    arr = _check_view(view)
    if arr.ndim < 2:
        raise ValueError("subview_1 needs a view of rank 2 or more")
    _check_index(arr, 1, i1)
    return arr[:, i1, ...]


def reshape(view: np.ndarray, *args: int) -> np.ndarray:
    """Reinterpret the contiguous data of ``view`` with the extents ``args``.

    The total size must not change; the result shares memory with ``view``.
    """
    if view is None:
        raise ValueError("view holds no data")
    arr = view if isinstance(view, np.ndarray) else np.asarray(view)
    if not arr.flags.c_contiguous:
        raise ValueError("only contiguous row-major data can be reshaped")
    shape = tuple(int(d) for d in args)
    if any(d < 0 for d in shape):
        raise ValueError("extents must be non-negative")
    size = 1
    for d in shape:
        size *= d
    if size != arr.size:
        raise ValueError(f"cannot view {arr.size} entries with extents {shape}")
    out = arr.reshape(shape)
    if arr.size and not np.shares_memory(out, arr):
        raise ValueError("reshape would copy the data")
    return out