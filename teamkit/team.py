"""Team-policy factories and concurrency bookkeeping for thread teams."""

from __future__ import annotations

import random
import threading
import time
from dataclasses import dataclass
from enum import Enum

_MIMIC_GPU_MAX_TEAM = 7
_WARP = 32
_MAX_GPU_TEAM = 128


class HostOrDevice(Enum):
    """Where a policy is meant to run."""

    HOST = "host"
    DEVICE = "device"


@dataclass(frozen=True)
class TeamPolicy:
    """A thread layout: how many teams, and how many threads in each."""

    league_size: int
    team_size: int


class ExeSpaceUtils:
    """Builds team policies suited to an execution space.

    On CPUs teams usually have one thread; on GPUs teams are made of whole
    warps so that more parallelism is exposed.
    """

    def __init__(self, concurrency: int, on_gpu: bool = False, mimic_gpu: bool = False) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.concurrency = concurrency
        self.on_gpu = on_gpu
        self.mimic_gpu = mimic_gpu

    @staticmethod
    def num_warps(i: int) -> int:
        """Number of warps needed to hold ``i`` threads."""
        return (i + _WARP - 1) // _WARP

    def _gpu_policy(self, ni: int, nk: int, host_or_device: HostOrDevice) -> TeamPolicy:
        if host_or_device is HostOrDevice.HOST:
            raise ValueError(
                "Error! Cannot get a policy on Host unless unified memory is enabled."
            )
        return TeamPolicy(ni, nk)

    def get_default_team_policy(
        self, ni: int, nk: int, host_or_device: HostOrDevice = HostOrDevice.DEVICE
    ) -> TeamPolicy:
        """The usual policy for ``ni`` independent items of ``nk`` inner work each."""
        if self.on_gpu:
            team_size = min(_MAX_GPU_TEAM, _WARP * self.num_warps(nk))
            return self._gpu_policy(ni, team_size, host_or_device)
        if self.mimic_gpu:
            return TeamPolicy(ni, min(self.concurrency, _MIMIC_GPU_MAX_TEAM))
        return TeamPolicy(ni, 1)

    def get_team_policy_force_team_size(
        self, ni: int, team_size: int, host_or_device: HostOrDevice = HostOrDevice.DEVICE
    ) -> TeamPolicy:
        """A policy with exactly the requested team size."""
        if self.on_gpu:
            return self._gpu_policy(ni, team_size, host_or_device)
        return TeamPolicy(ni, team_size)

    def get_thread_range_parallel_scan_team_policy(
        self,
        league_size: int,
        team_size_request: int,
        host_or_device: HostOrDevice = HostOrDevice.DEVICE,
    ) -> TeamPolicy:
        """A policy usable by team-level scans; on GPUs built from a power of 2."""
        if not self.on_gpu:
            return self.get_default_team_policy(league_size, team_size_request, host_or_device)
        pp2 = 1
        while pp2 <= team_size_request:
            pp2 *= 2
        pp2 //= 2
        team_size = _WARP * self.num_warps(pp2)
        return self._gpu_policy(league_size, min(_MAX_GPU_TEAM, team_size), host_or_device)


class TeamUtils:
    """Concurrency information for a policy, and hand-out of workspace slots.

    Double-precision work on a GPU gets half the threads of single precision.
    On a GPU with more teams in the league than slots, slots are shared: a
    team locks a free slot and unlocks it when done.
    """

    def __init__(
        self,
        policy: TeamPolicy,
        concurrency: int,
        single_precision: bool = False,
        on_gpu: bool = False,
        overprov_factor: float = 1.0,
    ) -> None:
        max_threads = concurrency
        if not single_precision and on_gpu:
            max_threads //= 2
        team_size = policy.team_size
        league_size = policy.league_size
        num_teams = max_threads // team_size if team_size > 0 else 0
        num_teams = min(num_teams, league_size)
        if num_teams <= 0:
            raise ValueError(
                "Should always be able to run at least 1 team."
                f"\n max_thrds   = {max_threads}"
                f"\n team_size   = {team_size}"
                f"\n league_size = {league_size}\n"
            )
        self._max_threads = max_threads
        self._num_teams = num_teams
        self._team_size = max_threads // (max_threads // team_size)
        self._league_size = league_size
        self._on_gpu = on_gpu

        if on_gpu:
            if league_size > num_teams:
                self._num_ws_slots = int(min(float(league_size), overprov_factor * num_teams))
            else:
                self._num_ws_slots = num_teams
        else:
            self._num_ws_slots = num_teams
        self._need_ws_sharing = on_gpu and league_size > self._num_ws_slots
        self._open_ws_slots = [False] * (self._num_ws_slots if self._need_ws_sharing else 0)
        self._slots_changed = threading.Condition()
        self._rand = random.Random(time.perf_counter_ns()) if self._need_ws_sharing else None

    @property
    def num_concurrent_teams(self) -> int:
        """How many thread teams can run concurrently."""
        return self._num_teams

    @property
    def max_concurrent_threads(self) -> int:
        """How many threads can run concurrently."""
        return self._max_threads

    @property
    def num_ws_slots(self) -> int:
        """How many workspace slots there are."""
        return self._num_ws_slots

    @property
    def team_size(self) -> int:
        return self._team_size

    @property
    def league_size(self) -> int:
        return self._league_size

    @property
    def need_ws_sharing(self) -> bool:
        """True if there are more teams in the league than workspace slots."""
        return self._need_ws_sharing

    def get_workspace_idx(self, league_rank: int) -> int:
        """Return the workspace slot for the team of rank ``league_rank``.

        When slots are shared, blocks until one is free and locks it.
        """
        if not self._on_gpu:
            return 0
        if not self._need_ws_sharing:
            return league_rank
        with self._slots_changed:
            ws_idx = league_rank % self._num_ws_slots
            while self._open_ws_slots[ws_idx]:
                if all(self._open_ws_slots):
                    self._slots_changed.wait()
                ws_idx = self._rand.randrange(self._num_ws_slots)
            self._open_ws_slots[ws_idx] = True
            return ws_idx

    def release_workspace_idx(self, ws_idx: int) -> None:
        """Unlock slot ``ws_idx`` so another team may take it."""
        if not self._need_ws_sharing:
            return
        with self._slots_changed:
            self._open_ws_slots[ws_idx] = False
            self._slots_changed.notify_all()