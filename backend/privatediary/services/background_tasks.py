"""
Background task services: fixed-interval jobs with per-job mutual exclusion
"""
import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Optional

from privatediary.models.base import utcnow

logger = logging.getLogger(__name__)


@dataclass
class PeriodicJob:
    """A named coroutine function run every ``interval`` seconds"""
    name: str
    interval: float
    func: Callable[[], Awaitable[Any]]
    run_immediately: bool = True
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    loop_task: Optional[asyncio.Task] = None
    current_run: Optional[asyncio.Task] = None
    runs: int = 0
    skipped: int = 0
    failures: int = 0
    last_started: Optional[datetime] = None
    last_error: Optional[str] = None
    last_result: Any = None


class BackgroundTaskManager:
    """Manages periodic background jobs.

    A tick that finds the previous run of the same job still in progress is
    skipped, so one job never overlaps itself. Stopping cancels the loops
    and any run in flight; nothing is drained.
    """

    def __init__(self):
        self.is_running = False
        self.jobs: Dict[str, PeriodicJob] = {}

    def add_job(
        self,
        name: str,
        interval: float,
        func: Callable[[], Awaitable[Any]],
        run_immediately: bool = True
    ) -> PeriodicJob:
        if name in self.jobs:
            raise ValueError(f"Job already registered: {name}")
        if interval <= 0:
            raise ValueError("Job interval must be positive")

        job = PeriodicJob(name=name, interval=interval, func=func, run_immediately=run_immediately)
        self.jobs[name] = job

        if self.is_running:
            job.loop_task = asyncio.create_task(self._job_loop(job))
        return job

    async def start(self):
        """Start all background jobs"""
        if self.is_running:
            return

        self.is_running = True
        logger.info("Starting background task manager")

        for job in self.jobs.values():
            job.loop_task = asyncio.create_task(self._job_loop(job))

        logger.info(f"Background jobs started: {', '.join(self.jobs) or 'none'}")

    async def stop(self):
        """Stop all background jobs"""
        if not self.is_running:
            return

        self.is_running = False
        logger.info("Stopping background task manager")

        for job in self.jobs.values():
            for task in (job.loop_task, job.current_run):
                if task and not task.done():
                    task.cancel()
                    try:
                        await task
                    except asyncio.CancelledError:
                        pass
            job.loop_task = None
            job.current_run = None
            logger.info(f"Cancelled job: {job.name}")

        logger.info("Background jobs stopped")

    async def _job_loop(self, job: PeriodicJob):
        if not job.run_immediately:
            await asyncio.sleep(job.interval)

        while self.is_running:
            if self._busy(job):
                job.skipped += 1
                logger.warning(f"Skipping {job.name}: previous run still in progress")
            else:
                job.current_run = asyncio.create_task(self._run_job(job))

            await asyncio.sleep(job.interval)

    @staticmethod
    def _busy(job: PeriodicJob) -> bool:
        return job.lock.locked() or (job.current_run is not None and not job.current_run.done())

    async def _run_job(self, job: PeriodicJob):
        async with job.lock:
            job.runs += 1
            job.last_started = utcnow()
            try:
                job.last_result = await job.func()
                job.last_error = None
            except asyncio.CancelledError:
                raise
            except Exception as e:
                job.failures += 1
                job.last_error = str(e)
                logger.error(f"Error in background job {job.name}: {e}")

    async def trigger(self, name: str) -> bool:
        """Run a job now. Returns False if it is already running."""
        job = self.jobs[name]
        if self._busy(job):
            logger.info(f"Manual trigger of {name} ignored: already running")
            return False

        job.current_run = asyncio.create_task(self._run_job(job))
        await job.current_run
        return True

    def get_task_status(self) -> Dict[str, Any]:
        """Get status of background jobs"""
        status = {
            'is_running': self.is_running,
            'tasks': {}
        }

        for name, job in self.jobs.items():
            status['tasks'][name] = {
                'interval': job.interval,
                'running': self._busy(job),
                'runs': job.runs,
                'skipped': job.skipped,
                'failures': job.failures,
                'last_started': job.last_started.isoformat() if job.last_started else None,
                'last_error': job.last_error
            }

        return status
