"""
Bounded parallel execution of independent tasks.

Each pull request is reconciled as its own task. Tasks share nothing, so
the executor only has to:

- Cap concurrency with a semaphore (``max_workers=1`` runs them one by one)
- Enforce a per-task timeout
- Turn any exception or timeout into a failed TaskResult, so one task can
  never cancel or abort its siblings

Example:
    >>> executor = ParallelExecutor(max_workers=4)
    >>> tasks = [ExecutionTask(id="pr-10", func=reconcile, args=(pr,))]
    >>> results = await executor.execute_tasks(tasks)
    >>> [r.success for r in results]
    [True]
"""

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import structlog

log = structlog.get_logger(__name__)


@dataclass
class ExecutionTask:
    """A unit of work for the executor.

    Attributes:
        id: Identifier used in logs and results
        func: Async callable to run
        args: Positional arguments for func
        kwargs: Keyword arguments for func
        timeout: Maximum run time in seconds
    """

    id: str
    func: Callable[..., Any]
    args: tuple = field(default_factory=tuple)
    kwargs: dict = field(default_factory=dict)
    timeout: float = 300.0


@dataclass
class TaskResult:
    """Outcome of one task.

    Attributes:
        task_id: ID of the task that was executed
        success: True if the task returned without error or timeout
        result: Return value of the task callable
        error: Exception that made the task fail
        execution_time: Run time in seconds
    """

    task_id: str
    success: bool
    result: Any = None
    error: BaseException | None = None
    execution_time: float = 0.0


class ParallelExecutor:
    """Run independent tasks with a concurrency limit.

    Attributes:
        max_workers: Maximum number of tasks running at once
        semaphore: Asyncio semaphore enforcing max_workers
    """

    def __init__(self, max_workers: int = 4) -> None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got: {max_workers}")
        self.max_workers = max_workers
        self.semaphore = asyncio.Semaphore(max_workers)

    async def execute_tasks(self, tasks: list[ExecutionTask]) -> list[TaskResult]:
        """Run all tasks and return their results in submission order.

        Never raises for task failures; they are captured in the results.
        """
        log.debug("parallel_execution_started", total_tasks=len(tasks), max_workers=self.max_workers)

        results = await asyncio.gather(*(self._execute_task(task) for task in tasks))

        log.debug(
            "parallel_execution_complete",
            total=len(results),
            failed=sum(1 for result in results if not result.success),
        )
        return list(results)

    async def _execute_task(self, task: ExecutionTask) -> TaskResult:
        async with self.semaphore:
            start_time = time.monotonic()

            try:
                result = await asyncio.wait_for(task.func(*task.args, **task.kwargs), timeout=task.timeout)
                return TaskResult(
                    task_id=task.id,
                    success=True,
                    result=result,
                    execution_time=time.monotonic() - start_time,
                )

            except TimeoutError as e:
                log.error("task_timeout", task_id=task.id, timeout=task.timeout)
                return TaskResult(
                    task_id=task.id,
                    success=False,
                    error=e,
                    execution_time=time.monotonic() - start_time,
                )

            except Exception as e:
                log.error("task_exception", task_id=task.id, error=str(e), exc_info=True)
                return TaskResult(
                    task_id=task.id,
                    success=False,
                    error=e,
                    execution_time=time.monotonic() - start_time,
                )
