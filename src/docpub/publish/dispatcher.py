"""Dispatchers hand queued builds to a runner.

The request path only queues a build and dispatches it; the dispatcher
decides whether the build runs on a worker thread or inline.
"""

import logging
import threading
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Dict, List, Optional

from docpub.models import Build

logger = logging.getLogger(__name__)

BuildHandler = Callable[[str], Build]

MAX_CONCURRENT_BUILDS = 4


class Dispatcher(ABC):
    """Interface of build dispatchers."""

    @abstractmethod
    def dispatch(self, build_id: str, handler: BuildHandler) -> None:
        """Run ``handler(build_id)`` now or on a worker."""


class InlineDispatcher(Dispatcher):
    """Run each build synchronously in the caller's thread."""

    def dispatch(self, build_id: str, handler: BuildHandler) -> None:
        handler(build_id)


class ThreadedDispatcher(Dispatcher):
    """Fire-and-forget dispatcher running builds on a thread pool.

    A build id is never run by two workers at once; dispatching an id that
    is already running is ignored. Finished builds are forgotten.

    Example:
        >>> dispatcher = ThreadedDispatcher()
        >>> service = PublishService(repo, orchestrator, revert_operator, dispatcher=dispatcher)
        >>> build = service.request_publish(site.id, actor)
        >>> dispatcher.wait(build.build_id)
        >>> repo.get_build(build.build_id).status
    """

    def __init__(self, max_workers: int = MAX_CONCURRENT_BUILDS):
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="docpub-build")
        self._lock = threading.Lock()
        self._running: Dict[str, Future] = {}

    def dispatch(self, build_id: str, handler: BuildHandler) -> None:
        with self._lock:
            current = self._running.get(build_id)
            if current is not None and not current.done():
                logger.warning(f"Build {build_id} is already dispatched")
                return
            future = self._executor.submit(self._run, build_id, handler)
            self._running[build_id] = future
        # Outside the lock: an already-done future runs the callback inline
        future.add_done_callback(lambda done: self._forget(build_id, done))

    def _forget(self, build_id: str, future: Future) -> None:
        with self._lock:
            if self._running.get(build_id) is future:
                del self._running[build_id]

    def _run(self, build_id: str, handler: BuildHandler) -> Optional[Build]:
        try:
            return handler(build_id)
        except Exception as e:
            logger.exception(f"Worker for build {build_id} crashed: {e}")
            return None

    def wait(self, build_id: str, timeout: Optional[float] = None) -> None:
        """Block until a dispatched build's worker finishes.

        Returns at once for unknown or already finished builds.
        """
        with self._lock:
            future = self._running.get(build_id)
        if future is not None:
            future.result(timeout=timeout)

    def active_build_ids(self) -> List[str]:
        with self._lock:
            return sorted(self._running)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
