"""Batch upload orchestration for gyz.

Resolves the user's paths once, then uploads every image through a bounded
thread pool. A failing file never stops its siblings; the batch fails as a
whole only after every task has reported.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Iterable, Optional, Protocol

from .errors import UploadError
from .models import UploadOption, UploadOutcome, UploadTask
from .paths import resolve_paths

logger = logging.getLogger(__name__)

DEFAULT_PARALLEL = 5


class Uploader(Protocol):
    def upload(self, file_path: str, option: UploadOption) -> str:
        ...


class UploadCancelledError(Exception):
    """Raised in place of an upload that was never started."""
    pass


class UploadBatchError(Exception):
    """Raised when at least one upload of a batch failed.

    Attributes:
        outcomes: Every outcome of the batch, in file order
        first_error: Error of the first failed file
    """

    def __init__(self, outcomes: list[UploadOutcome]) -> None:
        self.outcomes = outcomes
        self.failures = [o for o in outcomes if not o.ok]
        self.first_error = self.failures[0].error if self.failures else None
        super().__init__(
            f"{len(self.failures)} of {len(outcomes)} uploads failed"
            + (f" (first: {self.first_error})" if self.first_error else "")
        )


class UploadReporter:
    """Receives per-file progress events.

    Methods are called from worker threads. The default implementation
    does nothing.
    """

    def on_resolved(self, paths: list[str]) -> None:
        pass

    def on_start(self, path: str) -> None:
        pass

    def on_success(self, path: str, url: str) -> None:
        pass

    def on_failure(self, path: str, error: BaseException) -> None:
        pass


def run_uploads(
    targets: Iterable[str],
    option: UploadOption,
    client: Uploader,
    max_parallel: int = DEFAULT_PARALLEL,
    reporter: Optional[UploadReporter] = None,
    cancel_event: Optional[threading.Event] = None,
) -> list[UploadOutcome]:
    """Upload every image found under the given paths.

    Args:
        targets: Files or directories named by the user
        option: Upload option shared by all files
        client: Object with an upload(path, option) method
        max_parallel: Maximum number of concurrent uploads
        reporter: Receives start/success/failure events
        cancel_event: Set to stop dispatching new uploads

    Returns:
        Outcomes of all uploads, in file order

    Raises:
        ValueError: If max_parallel is less than 1
        OSError: If path resolution fails (nothing is uploaded)
        UploadBatchError: If any upload failed or was cancelled
    """
    if max_parallel < 1:
        raise ValueError(f"max_parallel must be at least 1, got {max_parallel}")

    file_paths = resolve_paths(targets)
    if reporter is not None:
        reporter.on_resolved(file_paths)
    tasks = [UploadTask(index=i, path=path, option=option) for i, path in enumerate(file_paths)]
    return run_tasks(tasks, client, max_parallel, reporter, cancel_event)


def run_tasks(
    tasks: list[UploadTask],
    client: Uploader,
    max_parallel: int = DEFAULT_PARALLEL,
    reporter: Optional[UploadReporter] = None,
    cancel_event: Optional[threading.Event] = None,
) -> list[UploadOutcome]:
    """Run upload tasks on a bounded pool and collect their outcomes.

    Args:
        tasks: Tasks to run (index must match position)
        client: Object with an upload(path, option) method
        max_parallel: Maximum number of concurrent uploads
        reporter: Receives start/success/failure events
        cancel_event: Set to stop dispatching new uploads

    Returns:
        Outcomes in task order

    Raises:
        UploadBatchError: If any task failed or was cancelled
    """
    if reporter is None:
        reporter = UploadReporter()
    if cancel_event is None:
        cancel_event = threading.Event()

    results: list[Optional[UploadOutcome]] = [None] * len(tasks)

    def upload_single(task: UploadTask) -> UploadOutcome:
        if cancel_event.is_set():
            return UploadOutcome(task.path, error=UploadCancelledError("upload cancelled"))

        try:
            reporter.on_start(task.path)
            url = client.upload(task.path, task.option)
        except (UploadError, OSError) as e:
            logger.debug("failed to upload %s: %s", task.path, e)
            reporter.on_failure(task.path, e)
            return UploadOutcome(task.path, error=e)
        except Exception as e:
            logger.exception("unexpected error while uploading %s", task.path)
            reporter.on_failure(task.path, e)
            return UploadOutcome(task.path, error=e)

        reporter.on_success(task.path, url)
        return UploadOutcome(task.path, url=url)

    def collect(future: Future, task: UploadTask) -> UploadOutcome:
        try:
            return future.result()
        except Exception as e:
            logger.exception("upload task for %s failed", task.path)
            return UploadOutcome(task.path, error=e)

    executor = ThreadPoolExecutor(max_workers=max_parallel, thread_name_prefix="gyz-upload")
    futures: dict[Future, UploadTask] = {}
    try:
        for task in tasks:
            futures[executor.submit(upload_single, task)] = task

        for future in as_completed(futures):
            task = futures[future]
            results[task.index] = collect(future, task)
    except KeyboardInterrupt:
        logger.warning("interrupted, waiting for running uploads to finish")
        cancel_event.set()
    finally:
        executor.shutdown(wait=True, cancel_futures=cancel_event.is_set())

    for future, task in futures.items():
        if results[task.index] is not None:
            continue
        if future.cancelled():
            results[task.index] = UploadOutcome(task.path, error=UploadCancelledError("upload cancelled"))
        else:
            results[task.index] = collect(future, task)

    for task in tasks:
        if results[task.index] is None:
            results[task.index] = UploadOutcome(task.path, error=UploadCancelledError("upload cancelled"))

    outcomes = [r for r in results if r is not None]
    if any(not outcome.ok for outcome in outcomes):
        raise UploadBatchError(outcomes)
    return outcomes
