# teamkit

teamkit is a set of utilities for code that splits its work across teams of
threads. It is built on numpy and runs on a single host.

## Modules

- `teamkit.workspace`: `WorkspaceManager` gives each team fixed-size scratch
  slots through a `Workspace`. A workspace has `take`, `take_many`,
  `take_many_contiguous_unsafe`, `take_macro_block`, `take_many_and_reset`,
  `release`, `release_many_contiguous`, `release_macro_block`, `reset` and
  `describe`. Misuse raises `WorkspaceError`. Takes and releases are counted
  per name. `WorkspaceManager.report()` prints and returns a usage summary,
  and it marks names whose takes and releases differ as possible leaks.
  `WorkspaceManager.get_total_bytes_needed` gives the memory a manager needs.
- `teamkit.team`: `TeamPolicy`, `ExeSpaceUtils`, `TeamUtils` and
  `HostOrDevice` choose team sizes and workspace slot counts for host or
  GPU-like execution spaces. When there are more teams than workspace slots,
  `TeamUtils` shares the slots among the teams with a lock.
- `teamkit.reduction`: `parallel_reduce` and `view_reduction` sum over scalar
  or packed inputs. With `serialize=True` they add the terms in index order,
  which gives reproducible results. Without it, they add the terms pairwise.
- `teamkit.views`: `subview`, `subview_range`, `subview_1` and `reshape`
  slice and reshape numpy arrays of rank 1 to 6. They share memory with the
  source array and do not copy it.
- `teamkit.anyvalue`: `Any` holds a single value of any type. `any_cast`
  returns the value if it has exactly the requested type, and raises
  `AnyCastError` if it does not.
- `teamkit.containers`: the search helpers `find`, `contains`, `erase` and
  `count`, and the helpers `same_type`, `format_sequence`,
  `remove_all_pointers`, `remove_all_consts` and `data_nd`.
- `teamkit.hello`: `greeting` and `main`, which back the `teamkit-hello`
  command.

## Example

```python
from teamkit.team import TeamPolicy, TeamUtils
from teamkit.workspace import WorkspaceManager

tu = TeamUtils(TeamPolicy(league_size=4, team_size=1), concurrency=4)
wsm = WorkspaceManager(size=16, max_used=3, team_utils=tu)

with wsm.get_workspace("solver", league_rank=0) as ws:
    a = ws.take("a")
    a[:] = 1.0
    ws.release(a)
```

## Command

```
teamkit-hello world
```

This prints `Hello world `, which is "Hello " followed by each argument and a
space.

## What it does not do

teamkit has no logging facility. It does not write log files and does not
filter output by process rank. It does not provide memory-layout or
memory-trait descriptors for arrays: views are plain numpy arrays in row-major
order.

## Installation

```
pip install .
pip install ".[test]"
```