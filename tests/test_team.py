import threading

import pytest

from teamkit.team import ExeSpaceUtils, HostOrDevice, TeamPolicy, TeamUtils


def test_cpu_default_policy_has_single_thread_teams():
    utils = ExeSpaceUtils(8)
    policy = utils.get_default_team_policy(42, 100)
    assert policy == TeamPolicy(42, 1)


def test_mimic_gpu_caps_team_size_at_seven():
    assert ExeSpaceUtils(16, mimic_gpu=True).get_default_team_policy(5, 3).team_size == 7
    assert ExeSpaceUtils(4, mimic_gpu=True).get_default_team_policy(5, 3).team_size == 4


def test_force_team_size_on_cpu_and_gpu():
    assert ExeSpaceUtils(8).get_team_policy_force_team_size(3, 5) == TeamPolicy(3, 5)
    assert ExeSpaceUtils(8, on_gpu=True).get_team_policy_force_team_size(3, 5) == TeamPolicy(3, 5)


def test_cpu_scan_policy_matches_default():
    utils = ExeSpaceUtils(8)
    assert utils.get_thread_range_parallel_scan_team_policy(9, 50) == utils.get_default_team_policy(9, 50)


def test_gpu_default_policy_uses_whole_warps_up_to_128():
    utils = ExeSpaceUtils(1000, on_gpu=True)
    assert utils.get_default_team_policy(10, 1).team_size == 32
    assert utils.get_default_team_policy(10, 33).team_size == 64
    assert utils.get_default_team_policy(10, 1000).team_size == 128
    assert utils.get_default_team_policy(10, 1000).league_size == 10


def test_gpu_team_sizes_are_multiples_of_warp():
    utils = ExeSpaceUtils(1000, on_gpu=True)
    for nk in range(1, 300, 7):
        size = utils.get_default_team_policy(1, nk).team_size
        assert size % 32 == 0
        assert size <= 128
        assert size >= min(nk, 128)


def test_gpu_scan_policy():
    utils = ExeSpaceUtils(1000, on_gpu=True)
    assert utils.get_thread_range_parallel_scan_team_policy(4, 5).team_size == 32
    assert utils.get_thread_range_parallel_scan_team_policy(4, 200).team_size == 128


def test_gpu_host_policy_rejected():
    utils = ExeSpaceUtils(1000, on_gpu=True)
    with pytest.raises(ValueError):
        utils.get_default_team_policy(4, 5, HostOrDevice.HOST)


def test_num_warps():
    assert ExeSpaceUtils.num_warps(32) == 1
    assert ExeSpaceUtils.num_warps(33) == 2


def test_team_utils_limited_by_league():
    tu = TeamUtils(TeamPolicy(3, 1), concurrency=8)
    assert tu.num_concurrent_teams == 3
    assert tu.num_ws_slots == 3
    assert tu.max_concurrent_threads == 8


def test_team_utils_limited_by_concurrency():
    tu = TeamUtils(TeamPolicy(100, 1), concurrency=8)
    assert tu.num_concurrent_teams == 8
    assert tu.get_workspace_idx(57) == 0


def test_gpu_double_precision_halves_threads():
    tu = TeamUtils(TeamPolicy(100, 1), concurrency=8, on_gpu=True)
    single = TeamUtils(TeamPolicy(100, 1), concurrency=8, single_precision=True, on_gpu=True)
    assert tu.max_concurrent_threads == 4
    assert single.max_concurrent_threads == 8


def test_no_team_possible_raises():
    with pytest.raises(ValueError, match="at least 1 team"):
        TeamUtils(TeamPolicy(10, 16), concurrency=8)
    with pytest.raises(ValueError):
        TeamUtils(TeamPolicy(0, 1), concurrency=8)


def test_gpu_without_sharing_returns_league_rank():
    tu = TeamUtils(TeamPolicy(4, 1), concurrency=8, single_precision=True, on_gpu=True)
    assert not tu.need_ws_sharing
    assert tu.get_workspace_idx(3) == 3


def test_overprovision_factor():
    policy = TeamPolicy(10, 1)
    base = TeamUtils(policy, 4, single_precision=True, on_gpu=True)
    doubled = TeamUtils(policy, 4, single_precision=True, on_gpu=True, overprov_factor=2.0)
    big = TeamUtils(policy, 4, single_precision=True, on_gpu=True, overprov_factor=5.0)
    assert base.num_ws_slots == 4 and base.need_ws_sharing
    assert doubled.num_ws_slots == 8 and doubled.need_ws_sharing
    assert big.num_ws_slots == 10 and not big.need_ws_sharing


def test_shared_slots_are_distinct_until_released():
    tu = TeamUtils(TeamPolicy(10, 1), 4, single_precision=True, on_gpu=True)
    taken = [tu.get_workspace_idx(rank) for rank in range(4)]
    assert sorted(taken) == list(range(tu.num_ws_slots))
    tu.release_workspace_idx(taken[2])
    assert tu.get_workspace_idx(9) == taken[2]


def test_waiting_team_gets_slot_after_release():
    tu = TeamUtils(TeamPolicy(10, 1), 4, single_precision=True, on_gpu=True)
    taken = [tu.get_workspace_idx(rank) for rank in range(4)]
    result = []
    worker = threading.Thread(target=lambda: result.append(tu.get_workspace_idx(5)))
    worker.start()
    worker.join(timeout=0.2)
    assert worker.is_alive()
    tu.release_workspace_idx(taken[0])
    worker.join(timeout=5)
    assert not worker.is_alive()
    assert result == [taken[0]]