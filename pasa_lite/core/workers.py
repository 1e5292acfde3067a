#!/usr/bin/env python3

"""
Bounded pool of scaffold validation tasks.

Submission blocks while every slot is busy. A failing task never stops the
others; failures are collected and handed back once all tasks are joined.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Any, Callable, Dict, List, Sequence

from .data_structures import TaskFault

ScaffoldTask = Callable[[str, Sequence[str]], Any]


class ValidationWorkerPool:
    """Run one task per scaffold with at most ``max_concurrency`` in flight."""

    def __init__(self, task: ScaffoldTask, max_concurrency: int = 2):
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self.task = task
        self.max_concurrency = max_concurrency
        self._slots = threading.BoundedSemaphore(max_concurrency)
        self._executor = ThreadPoolExecutor(max_workers=max_concurrency,
                                            thread_name_prefix="scaffold")
        self._futures: Dict[Any, str] = {}
        self.results: Dict[str, Any] = {}

    def submit(self, scaffold: str, accessions: Sequence[str]) -> None:
        """Start a task for one scaffold, waiting for a free slot first."""
        self._slots.acquire()
        try:
            future = self._executor.submit(self._run, scaffold, accessions)
        except BaseException:
            self._slots.release()
            raise
        self._futures[future] = scaffold

    def _run(self, scaffold: str, accessions: Sequence[str]) -> Any:
        try:
            return self.task(scaffold, accessions)
        finally:
            self._slots.release()

    def await_all(self) -> List[TaskFault]:
        """Join every submitted task and return the ones that raised."""
        wait(list(self._futures))
        self._executor.shutdown(wait=True)

        faults = []
        for future, scaffold in self._futures.items():
            error = future.exception()
            if error is None:
                self.results[scaffold] = future.result()
            else:
                logging.error(f"Task for scaffold {scaffold} failed: {error}")
                faults.append(TaskFault(scaffold, error))
        return faults

    @property
    def submitted(self) -> int:
        return len(self._futures)

    def __enter__(self) -> 'ValidationWorkerPool':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self._executor.shutdown(wait=True)
