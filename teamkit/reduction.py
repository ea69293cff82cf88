"""Sum reductions over index ranges, serial or team-style, for scalars and packs."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

import numpy as np


def _tree_sum(values: Sequence[Any]) -> Any:
    """Sum by pairwise combination, the way a team of threads reduces."""
    items = list(values)
    if not items:
        return 0
    while len(items) > 1:
        paired = [a + b for a, b in zip(items[::2], items[1::2])]
        if len(items) % 2:
            paired.append(items[-1])
        items = paired
    return items[0]


def _serial_sum(values: Sequence[Any]) -> Any:
    result: Any = 0
    for value in values:
        result = result + value
    return result


def parallel_reduce(
    begin: int,
    end: int,
    func: Callable[[int], Any],
    serialize: bool = False,
) -> Any:
    """Sum ``func(k)`` for ``k`` in ``[begin, end)``.

    With ``serialize`` the terms are added one at a time in index order, which
    gives results reproducible against serial code; otherwise they are
    combined pairwise. An empty range gives 0.
    """
    terms = [func(k) for k in range(begin, end)]
    return _serial_sum(terms) if serialize else _tree_sum(terms)


def view_reduction(
    begin: int,
    end: int,
    provider: Callable[[int], Any],
    pack_size: int | None = None,
    serialize: bool = False,
) -> Any:
    """Sum the scalar entries ``[begin, end)`` served by ``provider``.

    Without ``pack_size``, ``provider(k)`` returns the scalar at index ``k``.
    With it, ``provider(p)`` returns the pack of ``pack_size`` scalars that
    holds scalar indices ``p*pack_size`` to ``(p+1)*pack_size - 1``; entries of
    the first and last packs outside the range are left out.
    """
    if pack_size is None:
        return parallel_reduce(begin, end, provider, serialize)
    if pack_size < 1:
        raise ValueError("pack_size must be at least 1")
    n = pack_size

    def pack(p: int) -> np.ndarray:
        values = np.asarray(provider(p))
        if values.shape != (n,):
            raise ValueError(f"provider returned a pack of shape {values.shape}, expected ({n},)")
        return values

    if serialize:
        return parallel_reduce(begin, end, lambda k: pack(k // n)[k % n], True)

    if begin >= end:
        return 0

    first_pack, last_pack = begin // n, end // n
    if first_pack == last_pack:
        # The whole range lies inside one pack.
        return _serial_sum(pack(first_pack)[begin % n:end % n].tolist())

    result: Any = 0
    loop_begin = first_pack + 1 if begin % n else first_pack
    if begin % n:
        result = result + _serial_sum(pack(first_pack)[begin % n:].tolist())

    if loop_begin != last_pack:
        packed = parallel_reduce(loop_begin, last_pack, pack, False)
        result = result + _serial_sum(np.asarray(packed).tolist())

    if end % n:
        result = result + _serial_sum(pack(last_pack)[: end % n].tolist())
    return result