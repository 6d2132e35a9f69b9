"""Reconciliation engine."""

from gutenberg_ci_sync.engine.parallel_executor import ExecutionTask, ParallelExecutor, TaskResult
from gutenberg_ci_sync.engine.reconciler import Reconciler

__all__ = ["ExecutionTask", "ParallelExecutor", "Reconciler", "TaskResult"]
