"""
Server-Sent Events transport for crawl progress.

Every crawl owns a ProgressReporter. The hub keys reporters by job id so
that a browser can subscribe to a crawl before or while it runs. A
reporter lives as long as someone holds it (the crawl itself or an open
event stream) and is discarded when the last holder releases it.
"""

import asyncio
import json
from typing import AsyncIterator, Dict
import logging

from crawler.progress import ProgressReporter

logger = logging.getLogger(__name__)

DEFAULT_JOB_ID = "default"


def format_event(percent: int) -> str:
    """Encode a progress value as one SSE message."""
    return f"data: {json.dumps({'progress': percent})}\n\n"


class ProgressHub:
    """Reference-counted registry of per-job progress reporters."""

    def __init__(self):
        self._reporters: Dict[str, ProgressReporter] = {}
        self._holders: Dict[str, int] = {}

    def acquire(self, job_id: str = DEFAULT_JOB_ID) -> ProgressReporter:
        """Get the reporter for job_id, creating it if needed."""
        if job_id not in self._reporters:
            self._reporters[job_id] = ProgressReporter()
            self._holders[job_id] = 0
        self._holders[job_id] += 1
        return self._reporters[job_id]

    def release(self, job_id: str = DEFAULT_JOB_ID) -> None:
        """Drop one hold on job_id; the reporter is discarded with the last one."""
        if job_id not in self._holders:
            return
        self._holders[job_id] -= 1
        if self._holders[job_id] <= 0:
            del self._holders[job_id]
            del self._reporters[job_id]

    def get(self, job_id: str = DEFAULT_JOB_ID):
        return self._reporters.get(job_id)

    def __contains__(self, job_id: str) -> bool:
        return job_id in self._reporters

    def __len__(self) -> int:
        return len(self._reporters)


async def stream_progress(
    hub: ProgressHub,
    job_id: str,
    is_disconnected,
    keepalive_seconds: float = 15.0
) -> AsyncIterator[str]:
    """
    Yield SSE messages for one subscriber.

    Sends the current value immediately, then each update, and stops after
    delivering 100 or once the client has gone away. The subscription is
    removed on every exit path.

    Args:
        hub: Hub holding the job's reporter
        job_id: Crawl to follow
        is_disconnected: Async callable returning True when the client left
        keepalive_seconds: Idle time before a keep-alive comment is sent
    """
    reporter = hub.acquire(job_id)
    updates: asyncio.Queue = asyncio.Queue()
    observer = reporter.subscribe(updates.put_nowait)
    logger.debug(f"Progress subscriber joined job '{job_id}' ({reporter.observer_count} listening)")

    try:
        percent = reporter.percent
        yield format_event(percent)

        while percent < 100:
            if await is_disconnected():
                break
            try:
                percent = await asyncio.wait_for(updates.get(), timeout=keepalive_seconds)
            except asyncio.TimeoutError:
                yield ": keep-alive\n\n"
                continue
            yield format_event(percent)
    finally:
        reporter.unsubscribe(observer)
        hub.release(job_id)
        logger.debug(f"Progress subscriber left job '{job_id}'")
