"""A manager of per-team scratch memory handed out in fixed-size slots.

Each workspace index owns ``max_used`` slots of ``size`` entries. Free slots
form a singly linked list; taking a slot pops the head of the list and
releasing one pushes it back, so the most recently released slot is the
next one handed out. Usage is tracked per name so that leaks can be
reported.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from teamkit.team import TeamUtils

_INT_BYTES = 4


class WorkspaceError(RuntimeError):
    """Raised when a workspace is used in a way that breaks its bookkeeping."""


def _reserve_slots(itemsize: int) -> int:
    """Entries set aside before each slot for its index and next pointer."""
    if itemsize > 2 * _INT_BYTES:
        return 1
    return (2 * _INT_BYTES + itemsize - 1) // itemsize


@dataclass
class _Usage:
    """Bookkeeping for one workspace index."""

    max_used: int
    num_used: int = 0
    high_water: int = 0
    active: list[bool] = field(default_factory=list)
    curr_names: list[str] = field(default_factory=list)
    counts: dict[str, list[int]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.active = [False] * self.max_used
        self.curr_names = [""] * self.max_used


class WorkspaceManager:
    """Owns the scratch memory of every workspace index and its slot lists."""

    def __init__(
        self,
        size: int,
        max_used: int,
        team_utils: TeamUtils,
        data: np.ndarray | None = None,
    ) -> None:
        if size < 0:
            raise ValueError("size must be non-negative")
        if max_used < 1:
            raise ValueError("max_used must be at least 1")
        self._tu = team_utils
        self._max_ws_idx = team_utils.num_ws_slots
        dtype = np.dtype(np.float64) if data is None else np.asarray(data).dtype
        self._itemsize = dtype.itemsize
        self._reserve = _reserve_slots(self._itemsize)
        self._size = size
        self._total = size + self._reserve
        self._max_used = max_used

        shape = (self._max_ws_idx, self._total * self._max_used)
        if data is None:
            self._data = np.empty(shape, dtype=dtype)
        else:
            arr = np.asarray(data)
            needed = shape[0] * shape[1]
            if arr.size != needed:
                raise ValueError(f"data holds {arr.size} entries, {needed} are needed")
            if not arr.flags.c_contiguous:
                raise ValueError("data must be contiguous")
            self._data = arr.reshape(shape)

        self._next = np.empty((self._max_ws_idx, self._max_used), dtype=np.int64)
        self._next_slot = [0] * self._max_ws_idx
        self._usage = [_Usage(self._max_used) for _ in range(self._max_ws_idx)]
        self._init_all_metadata()

    @property
    def data(self) -> np.ndarray:
        """The whole block of memory, one row per workspace index."""
        return self._data

    @property
    def size(self) -> int:
        return self._size

    @property
    def max_used(self) -> int:
        return self._max_used

    @staticmethod
    def get_total_bytes_needed(
        size: int, max_used: int, team_utils: TeamUtils, itemsize: int = 8
    ) -> int:
        """Bytes of memory a manager with these parameters needs."""
        total_slots = size + _reserve_slots(itemsize)
        return team_utils.num_ws_slots * total_slots * max_used * itemsize

    def _init_slot_metadata(self, ws_idx: int, slot: int) -> None:
        self._next[ws_idx, slot] = slot + 1

    def _init_all_metadata(self) -> None:
        for ws_idx in range(self._max_ws_idx):
            for slot in range(self._max_used):
                self._init_slot_metadata(ws_idx, slot)

    def _space_in_slot(self, ws_idx: int, slot: int, n_slots: int = 1) -> np.ndarray:
        if not 0 <= slot or slot + n_slots > self._max_used:
            raise WorkspaceError(f"slot {slot} out of range")
        start = slot * self._total + self._reserve
        length = self._size if n_slots == 1 else n_slots * self._total - self._reserve
        space = self._data[ws_idx, start:start + length]
        if np.issubdtype(space.dtype, np.inexact):
            space.fill(np.nan)
        return space

    def _index(self, ws_idx: int, space: np.ndarray) -> int:
        arr = np.asarray(space)
        base = self._data[ws_idx].__array_interface__["data"][0]
        addr = arr.__array_interface__["data"][0]
        offset, rem = divmod(addr - base, self._itemsize)
        slot, pos = divmod(offset - self._reserve, self._total)
        if rem or pos or not 0 <= slot < self._max_used:
            raise WorkspaceError(f"space does not belong to workspace index {ws_idx}")
        return slot

    def report(self) -> str:
        """Print and return a summary of slot usage and of takes and releases per name."""
        lines = ["", f"WS usage (capped at {self._max_used}): "]
        for t, usage in enumerate(self._usage):
            lines.append(f"WS {t} currently using {usage.num_used}")
            lines.append(f"WS {t} high-water {usage.high_water}")

        lines += ["", "WS deep analysis"]
        summary: dict[str, list[int]] = {}
        for t, usage in enumerate(self._usage):
            lines.append(f"  For wsidx {t}")
            for name, (takes, releases) in usage.counts.items():
                lines.append(
                    f"    workspace '{name}' was taken {takes} times"
                    f" and released {releases} times"
                )
                if takes != releases:
                    lines.append("      POSSIBLE LEAK")
                entry = summary.setdefault(name, [0, 0, 0])
                entry[0] += 1
                entry[1] += takes
                entry[2] += releases

        lines += ["", "WS workspace summary"]
        for name in sorted(summary):
            used, takes, releases = summary[name]
            lines.append(
                f"Workspace '{name}' was used by {used} wsindices with "
                f"{takes} takes and {releases} releases."
            )
        text = "\n".join(lines) + "\n"
        print(text, end="")
        return text

    def reset_internals(self) -> None:
        """Mark every slot free and clear the counts and high-water marks."""
        for usage in self._usage:
            usage.active = [False] * self._max_used
            for counts in usage.counts.values():
                counts[0] = counts[1] = 0
            usage.high_water = 0
        self._next_slot = [0] * self._max_ws_idx
        self._init_all_metadata()

    def get_workspace(self, ws_name: str, league_rank: int = 0) -> "Workspace":
        """Return the workspace of the team with rank ``league_rank``."""
        return Workspace(self, self._tu.get_workspace_idx(league_rank), ws_name)

    def release_workspace(self, ws: "Workspace") -> None:
        """Give the workspace index of ``ws`` back to the team utilities."""
        self._tu.release_workspace_idx(ws.ws_idx)


class Workspace:
    """One team's view of its workspace index: takes and releases slots."""

    def __init__(self, parent: WorkspaceManager, ws_idx: int, ws_name: str) -> None:
        self._parent = parent
        self.ws_idx = ws_idx
        self.name = ws_name

    @property
    def _usage(self) -> _Usage:
        return self._parent._usage[self.ws_idx]

    @property
    def _next_slot(self) -> int:
        return self._parent._next_slot[self.ws_idx]

    @_next_slot.setter
    def _next_slot(self, value: int) -> None:
        self._parent._next_slot[self.ws_idx] = value

    def _fail(self, reason: str) -> WorkspaceError:
        return WorkspaceError(f"{self.name}: {reason}")

    def _change_num_used(self, change_by: int) -> None:
        usage = self._usage
        curr = usage.num_used + change_by
        if curr > self._parent._max_used:
            raise self._fail("more slots in use than available")
        if curr < 0:
            raise self._fail("more slots released than taken")
        usage.num_used = curr
        usage.high_water = max(usage.high_water, curr)

    def _change_indv_meta(self, space: np.ndarray, name: str, release: bool = False) -> None:
        usage = self._usage
        slot = self._parent._index(self.ws_idx, space)
        if not release:
            if not name:
                raise self._fail("workspace names must not be empty")
            if usage.active[slot]:
                raise self._fail(f"slot {slot} is already taken")
            usage.curr_names[slot] = name
            counts = usage.counts.setdefault(name, [0, 0])
        else:
            if not usage.active[slot]:
                raise self._fail(f"slot {slot} is not taken")
            name = usage.curr_names[slot]
            if name not in usage.counts:
                raise self._fail(f"unknown workspace name '{name}'")
            counts = usage.counts[name]
        counts[1 if release else 0] += 1
        usage.active[slot] = not release

    def _verify_contiguous(self, start: int, n: int) -> None:
        nxt = self._parent._next[self.ws_idx]
        for k in range(n - 1):
            if start + k >= self._parent._max_used or nxt[start + k] != start + k + 1:
                raise self._fail("slots are not contiguous")

    def take(self, name: str) -> np.ndarray:
        """Take the next free slot and return its memory."""
        self._change_num_used(1)
        slot = self._next_slot
        space = self._parent._space_in_slot(self.ws_idx, slot)
        self._next_slot = int(self._parent._next[self.ws_idx, slot])
        self._change_indv_meta(space, name)
        return space

    def take_many(self, names: Sequence[str]) -> list[np.ndarray]:
        """Take one slot for each name, following the free list."""
        self._change_num_used(len(names))
        spaces = []
        slot = self._next_slot
        for _ in names:
            spaces.append(self._parent._space_in_slot(self.ws_idx, slot))
            slot = int(self._parent._next[self.ws_idx, slot])
        self._next_slot = slot
        for space, name in zip(spaces, names):
            self._change_indv_meta(space, name)
        return spaces

    def take_many_contiguous_unsafe(self, names: Sequence[str]) -> list[np.ndarray]:
        """Take one slot per name from consecutive slots; they must be free and linked in order."""
        n = len(names)
        self._change_num_used(n)
        start = self._next_slot
        self._verify_contiguous(start, n)
        spaces = [self._parent._space_in_slot(self.ws_idx, start + k) for k in range(n)]
        self._next_slot = start + n
        for space, name in zip(spaces, names):
            self._change_indv_meta(space, name)
        return spaces

    def take_macro_block(self, name: str, n_sub_blocks: int) -> np.ndarray:
        """Take ``n_sub_blocks`` consecutive slots as one block of memory."""
        self._change_num_used(n_sub_blocks)
        start = self._next_slot
        self._verify_contiguous(start, n_sub_blocks)
        space = self._parent._space_in_slot(self.ws_idx, start, n_sub_blocks)
        self._next_slot = start + n_sub_blocks
        self._change_indv_meta(space, name)
        return space

    def _release_all_active(self) -> None:
        for slot, active in enumerate(list(self._usage.active)):
            if active:
                space = self._parent._space_in_slot(self.ws_idx, slot)
                self._change_indv_meta(space, "", True)

    def take_many_and_reset(self, names: Sequence[str]) -> list[np.ndarray]:
        """Release everything, then take the first ``len(names)`` slots."""
        n = len(names)
        self._change_num_used(n - self._usage.num_used)
        spaces = [self._parent._space_in_slot(self.ws_idx, k) for k in range(n)]
        for slot in range(n, self._parent._max_used):
            self._parent._init_slot_metadata(self.ws_idx, slot)
        self._next_slot = n
        self._release_all_active()
        for space, name in zip(spaces, names):
            self._change_indv_meta(space, name)
        return spaces

    def reset(self) -> None:
        """Release every slot and restore the free list to its initial order."""
        self._change_num_used(-self._usage.num_used)
        self._next_slot = 0
        for slot in range(self._parent._max_used):
            self._parent._init_slot_metadata(self.ws_idx, slot)
        self._release_all_active()

    def release(self, space: np.ndarray) -> None:
        """Give back one slot; it becomes the next one taken."""
        slot = self._parent._index(self.ws_idx, space)
        self._change_num_used(-1)
        try:
            self._change_indv_meta(space, "", True)
        except WorkspaceError:
            self._change_num_used(1)
            raise
        self._parent._next[self.ws_idx, slot] = self._next_slot
        self._next_slot = slot

    def release_many_contiguous(self, spaces: Sequence[np.ndarray]) -> None:
        """Give back slots taken with take_many_contiguous_unsafe."""
        if not spaces:
            return
        slots = [self._parent._index(self.ws_idx, s) for s in spaces]
        self._change_num_used(-len(spaces))
        nxt = self._parent._next[self.ws_idx]
        for slot in slots[:-1]:
            if nxt[slot] != slot + 1:
                raise self._fail("slots are not contiguous")
        self._next_slot = slots[0]
        for space in spaces:
            self._change_indv_meta(space, "", True)

    def release_macro_block(self, space: np.ndarray, n_sub_blocks: int) -> None:
        """Give back a block taken with take_macro_block."""
        slot = self._parent._index(self.ws_idx, space)
        self._change_num_used(-n_sub_blocks)
        self._next_slot = slot
        self._change_indv_meta(space, "", True)
        for k in range(n_sub_blocks):
            self._parent._init_slot_metadata(self.ws_idx, slot + k)

    def describe(self) -> str:
        """The free list from the next slot on, as ``idx: (slot, next) ...``."""
        parts = [f"{self.ws_idx}:"]
        slot = self._next_slot
        for _ in range(self._parent._max_used):
            if slot >= self._parent._max_used:
                break
            nxt = int(self._parent._next[self.ws_idx, slot])
            parts.append(f" ({slot}, {nxt})")
            slot = nxt
        return "".join(parts) + "\n"

    def __enter__(self) -> "Workspace":
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self._parent.release_workspace(self)