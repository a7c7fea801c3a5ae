import time
from concurrent.futures import ThreadPoolExecutor

from adminia.config.settings import Settings
from adminia.documents.base import BaseProcessingQueue
from adminia.documents.models import QueueEntry
from adminia.logging.logger import Log
from adminia.worker.job_runner import JobRunner


class Worker:
    """Poll loop: sleep -> fetch pending entries -> dispatch to the thread pool."""

    def __init__(
        self,
        queue: BaseProcessingQueue,
        job_runner: JobRunner,
        settings: Settings,
    ) -> None:
        self._queue = queue
        self._job_runner = job_runner
        self._settings = settings

    def run(self, max_jobs: int | None = None) -> None:
        """Main poll loop. Runs forever until interrupted.

        If max_jobs is set, stop once that many entries were dispatched (for testing).
        """
        Log.info(
            f"Worker started with {self._settings.worker_concurrency} threads, "
            "polling the processing queue"
        )
        jobs_done = 0
        try:
            with ThreadPoolExecutor(
                max_workers=self._settings.worker_concurrency,
                thread_name_prefix="analysis",
            ) as executor:
                while max_jobs is None or jobs_done < max_jobs:
                    entries = self._fetch_pending(max_jobs, jobs_done)
                    if entries:
                        list(executor.map(self._job_runner.run, entries))
                        jobs_done += len(entries)
                    else:
                        Log.debug("No pending entries, sleeping")
                        time.sleep(self._settings.worker_poll_interval_seconds)
        except KeyboardInterrupt:
            Log.info("Worker shutting down gracefully")

    def _fetch_pending(self, max_jobs: int | None, jobs_done: int) -> list[QueueEntry]:
        """Read the next batch of pending entries. Gracefully handle store errors."""
        limit = self._settings.worker_batch_size
        if max_jobs is not None:
            limit = min(limit, max_jobs - jobs_done)
        try:
            return self._queue.list_pending(limit)
        except Exception as exc:
            Log.warning(f"Queue read failed, will retry: {exc}")
            return []
