"""Order-preserving parallel execution used to parse many files at once."""

from __future__ import annotations

import concurrent.futures
import os
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Literal, Mapping, Sequence, TypeVar

T = TypeVar("T")

Mode = Literal["thread", "process"]

__all__ = ["ParallelExecutionError", "ParallelTimeoutError", "run_parallel"]


@dataclass(frozen=True)
class _PoolDefaults:
    mode: Mode
    max_workers: int | None
    timeout: float | None


class ParallelExecutionError(RuntimeError):
    """Raised when a parallel task fails.

    ``index`` is the position of the failed task in the input and ``cause`` the
    original exception (also chained as ``__cause__``).
    """

    def __init__(self, *, index: int, mode: str, task: str, cause: BaseException) -> None:
        super().__init__(f"parallel task {index} failed in {mode} mode: {cause}")
        self.index = index
        self.mode = mode
        self.task = task
        self.cause = cause


class ParallelTimeoutError(TimeoutError):
    """Raised when ``run_parallel`` exceeds its deadline."""

    def __init__(self, *, timeout: float, completed: int, total: int) -> None:
        super().__init__(f"parallel execution timed out after {timeout:.3f}s")
        self.timeout = timeout
        self.completed = completed
        self.total = total


def run_parallel(
    tasks: Sequence[Callable[[], T]] | Iterable[Callable[[], T]],
    *,
    mode: Mode | None = None,
    max_workers: int | None = None,
    timeout: float | None = None,
    config: Mapping[str, Any] | None = None,
) -> list[T]:
    """Execute ``tasks`` in parallel and return results in input order.

    Parameters
    ----------
    tasks:
        Parameterless callables.  Process mode requires them to be picklable.
    mode:
        ``"thread"`` or ``"process"``; defaults to ``config["default_mode"]``
        and finally to threads.
    max_workers:
        Upper bound on workers, capped at the number of tasks.
    timeout:
        Overall deadline in seconds.
    config:
        The ``concurrency`` section of the settings file, supplying defaults
        for the three options above.

    Raises
    ------
    ParallelExecutionError
        When a task raises; remaining tasks are cancelled.
    ParallelTimeoutError
        When the deadline elapses first.
    """

    task_list = list(tasks)
    if not task_list:
        return []
    for index, task in enumerate(task_list):
        if not callable(task):
            raise TypeError(f"task at position {index} is not callable: {task!r}")

    defaults = _defaults(config or {}, mode)
    selected_mode = defaults.mode
    selected_timeout = timeout if timeout is not None else defaults.timeout
    workers = _resolve_max_workers(
        selected_mode,
        max_workers if max_workers is not None else defaults.max_workers,
        len(task_list),
    )

    executor: concurrent.futures.Executor
    if selected_mode == "process":
        executor = concurrent.futures.ProcessPoolExecutor(max_workers=workers)
    else:
        executor = concurrent.futures.ThreadPoolExecutor(max_workers=workers)

    start_time = time.perf_counter()
    try:
        futures = {executor.submit(task): index for index, task in enumerate(task_list)}
        results: list[Any] = [None] * len(task_list)
        pending = set(futures)
        completed = 0
        while pending:
            wait_timeout = None
            if selected_timeout is not None:
                remaining = selected_timeout - (time.perf_counter() - start_time)
                if remaining <= 0.0:
                    _cancel_pending(pending)
                    raise ParallelTimeoutError(
                        timeout=selected_timeout, completed=completed, total=len(task_list)
                    )
                wait_timeout = max(0.0, min(0.5, remaining))
            done, pending = concurrent.futures.wait(
                pending, timeout=wait_timeout, return_when=concurrent.futures.FIRST_COMPLETED
            )
            for future in sorted(done, key=futures.__getitem__):
                index = futures[future]
                try:
                    results[index] = future.result()
                except Exception as exc:
                    _cancel_pending(pending)
                    raise ParallelExecutionError(
                        index=index,
                        mode=selected_mode,
                        task=_safe_callable_repr(task_list[index]),
                        cause=exc,
                    ) from exc
                completed += 1
        return results
    finally:
        executor.shutdown(wait=True, cancel_futures=True)


def _defaults(section: Mapping[str, Any], mode: Mode | None) -> _PoolDefaults:
    selected = mode or str(section.get("default_mode", "thread")).lower()
    if selected not in ("thread", "process"):
        raise ValueError(f"unknown concurrency mode {selected!r}")
    pool = section.get(selected)
    if not isinstance(pool, Mapping):
        pool = {}
    return _PoolDefaults(
        mode=selected,  # type: ignore[arg-type]
        max_workers=_coerce(pool.get("max_workers"), int),
        timeout=_coerce(pool.get("timeout"), float),
    )


def _resolve_max_workers(mode: Mode, configured: int | None, task_count: int) -> int:
    if configured is not None and configured > 0:
        return min(configured, max(1, task_count))
    cpu_count = os.cpu_count() or 1
    if mode == "process":
        return min(cpu_count, max(1, task_count))
    return max(1, min(task_count, cpu_count * 4))


def _cancel_pending(pending: Iterable[concurrent.futures.Future[Any]]) -> None:
    for future in pending:
        future.cancel()


def _safe_callable_repr(task: Callable[[], Any]) -> str:
    target = getattr(task, "func", task)
    name = getattr(target, "__qualname__", None) or getattr(target, "__name__", None)
    module = getattr(target, "__module__", None)
    if name and module:
        return f"{module}.{name}"
    return repr(task)


def _coerce(value: Any, kind: Callable[[Any], Any]) -> Any:
    if value is None:
        return None
    try:
        return kind(value)
    except (TypeError, ValueError):
        return None
