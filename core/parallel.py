#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
ParallelProcessor - bounded fan-out with per-task retry and backoff
"""

import asyncio
import random
import time
from typing import Any, Awaitable, Callable, List, Optional, Tuple
from dataclasses import dataclass
from enum import Enum

import httpx
from tqdm import tqdm

from config.constants import (
    PIPELINE_MAX_CONCURRENCY,
    REQUEST_TIMEOUT_SECONDS,
    TRANSLATION_MAX_ATTEMPTS,
    TRANSLATION_RETRY_BASE_DELAY,
    TRANSLATION_RETRY_MAX_DELAY,
    TRANSLATION_RETRY_JITTER,
)
from config.logging_config import get_logger
from .errors import (
    ConfigurationError,
    RecordTranslationFailure,
    TransientProviderError,
    ERROR_PROVIDER,
    ERROR_RETRIES_EXHAUSTED,
)

logger = get_logger(__name__)

ProcessorFunc = Callable[[Any], Awaitable[Any]]


class TaskStatus(Enum):
    """Task status"""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    RETRYING = "retrying"


@dataclass
class Task:
    """One unit of work (e.g. one request batch)"""
    id: int
    data: Any
    status: TaskStatus = TaskStatus.PENDING
    result: Optional[Any] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    retry_count: int = 0
    start_time: Optional[float] = None
    end_time: Optional[float] = None


@dataclass
class ProcessingStats:
    """Processing statistics"""
    total_tasks: int = 0
    completed: int = 0
    failed: int = 0
    retried: int = 0
    total_time: float = 0.0
    avg_time_per_task: float = 0.0

    def update(self, task: Task):
        """Update stats from a finished task"""
        if task.status == TaskStatus.COMPLETED:
            self.completed += 1
            if task.start_time is not None and task.end_time is not None:
                self.total_time += (task.end_time - task.start_time)
        elif task.status == TaskStatus.FAILED:
            self.failed += 1

        if task.retry_count > 0:
            self.retried += 1

        if self.completed > 0:
            self.avg_time_per_task = self.total_time / self.completed


class ParallelProcessor:
    """
    Run async work items concurrently with a semaphore, retrying transient
    failures with exponential backoff and jitter.

    Retry rules:
    - TransientProviderError, timeouts and httpx transport errors are retried
      until ``max_attempts`` is reached, then the task fails with
      ``retries_exhausted``.
    - RecordTranslationFailure fails the task immediately with its code.
    - ConfigurationError is re-raised from process_all; it is never a
      per-task outcome.

    Backoff sleeps only the task that is waiting, so other tasks keep going.
    """

    def __init__(
        self,
        max_concurrency: int = PIPELINE_MAX_CONCURRENCY,
        max_attempts: int = TRANSLATION_MAX_ATTEMPTS,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        retry_base_delay: float = TRANSLATION_RETRY_BASE_DELAY,
        retry_max_delay: float = TRANSLATION_RETRY_MAX_DELAY,
        show_progress: bool = False,
        description: str = "Processing"
    ):
        """
        Args:
            max_concurrency: Maximum tasks running at once
            max_attempts: Attempts per task, including the first one
            timeout: Timeout per attempt (seconds)
            retry_base_delay: First backoff delay, doubled per attempt
            retry_max_delay: Upper bound for a single backoff delay
            show_progress: Show a tqdm progress bar
            description: Progress bar label
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

        self.max_concurrency = max_concurrency
        self.max_attempts = max_attempts
        self.timeout = timeout
        self.retry_base_delay = retry_base_delay
        self.retry_max_delay = retry_max_delay
        self.show_progress = show_progress
        self.description = description

    def backoff_delay(self, attempt: int, retry_after: Optional[float] = None) -> float:
        """Delay before the next attempt (attempt is 1-based)"""
        if retry_after is not None and retry_after > 0:
            return min(retry_after, self.retry_max_delay)
        base_delay = min(self.retry_base_delay * (2 ** (attempt - 1)), self.retry_max_delay)
        jitter = random.uniform(0, base_delay * TRANSLATION_RETRY_JITTER)
        return base_delay + jitter

    async def process_task(
        self,
        task: Task,
        processor_func: ProcessorFunc,
        semaphore: asyncio.Semaphore,
        progress_bar: Optional[tqdm] = None
    ) -> Task:
        """Process one task with retry logic"""

        async with semaphore:
            task.start_time = time.time()
            attempt = 0

            while attempt < self.max_attempts:
                attempt += 1
                task.retry_count = attempt - 1
                task.status = TaskStatus.RUNNING if attempt == 1 else TaskStatus.RETRYING
                retry_after = None

                try:
                    task.result = await asyncio.wait_for(
                        processor_func(task.data),
                        timeout=self.timeout
                    )
                    task.status = TaskStatus.COMPLETED
                    task.error = None
                    task.error_code = None
                    break

                except ConfigurationError:
                    raise

                except RecordTranslationFailure as e:
                    task.status = TaskStatus.FAILED
                    task.error = str(e)
                    task.error_code = e.code
                    logger.error(f" Task #{task.id}: {task.error} ({e.code})")
                    break

                except TransientProviderError as e:
                    task.error = str(e)
                    retry_after = e.retry_after
                    logger.warning(f" Task #{task.id}: {task.error} (attempt {attempt}/{self.max_attempts})")

                except asyncio.TimeoutError:
                    task.error = f"Timeout after {self.timeout}s"
                    logger.warning(f" Task #{task.id}: {task.error} (attempt {attempt}/{self.max_attempts})")

                except httpx.TransportError as e:
                    task.error = f"HTTP transport error: {e}"
                    logger.warning(f" Task #{task.id}: {task.error} (attempt {attempt}/{self.max_attempts})")

                except Exception as e:
                    task.status = TaskStatus.FAILED
                    task.error = f"{type(e).__name__}: {e}"
                    task.error_code = ERROR_PROVIDER
                    logger.exception(f" Task #{task.id}: unexpected error")
                    break

                if attempt < self.max_attempts:
                    await asyncio.sleep(self.backoff_delay(attempt, retry_after))
            else:
                # Attempts exhausted on transient errors
                task.status = TaskStatus.FAILED
                task.error_code = ERROR_RETRIES_EXHAUSTED
                logger.error(f" Task #{task.id}: giving up after {self.max_attempts} attempts ({task.error})")

            task.end_time = time.time()

            if progress_bar:
                progress_bar.update(1)

            return task

    async def process_all(
        self,
        data_list: List[Any],
        processor_func: ProcessorFunc
    ) -> Tuple[List[Task], ProcessingStats]:
        """
        Process all items concurrently.

        Args:
            data_list: Items to process (e.g. request batches)
            processor_func: Async function called with one item

        Returns:
            Tuple of (tasks in input order, stats)

        Raises:
            ConfigurationError: If any task hit a configuration problem
        """
        tasks = [Task(id=i, data=data) for i, data in enumerate(data_list)]
        stats = ProcessingStats(total_tasks=len(tasks))
        semaphore = asyncio.Semaphore(self.max_concurrency)

        progress_bar = None
        if self.show_progress and tasks:
            progress_bar = tqdm(
                total=len(tasks),
                desc=self.description,
                unit="task",
                bar_format="{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}]"
            )

        try:
            start_time = time.time()

            # return_exceptions so one bad task never cancels its siblings
            outcomes = await asyncio.gather(
                *(self.process_task(task, processor_func, semaphore, progress_bar) for task in tasks),
                return_exceptions=True
            )

            config_error: Optional[ConfigurationError] = None
            for task, outcome in zip(tasks, outcomes):
                if isinstance(outcome, ConfigurationError):
                    config_error = config_error or outcome
                    task.status = TaskStatus.FAILED
                    task.error = str(outcome)
                elif isinstance(outcome, asyncio.CancelledError):
                    raise outcome
                elif isinstance(outcome, BaseException):
                    logger.error(f" Task {task.id} failed with exception: {type(outcome).__name__}: {outcome}")
                    task.status = TaskStatus.FAILED
                    task.error = str(outcome)
                    task.error_code = ERROR_PROVIDER
                stats.update(task)

            stats.total_time = time.time() - start_time

            if config_error is not None:
                raise config_error

            return tasks, stats

        finally:
            if progress_bar:
                progress_bar.close()
