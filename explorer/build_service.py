# build_service.py

import asyncio
import logging
from concurrent.futures import Future, ThreadPoolExecutor

from tree_builder import TreeBuilder

logger = logging.getLogger(__name__)


class TreeBuildService:
    """Runs tree builds off the caller's thread, one at a time.

    A single worker thread means a new request waits until the in-flight
    build completes. Each call produces its own tree; nothing is cached.
    """

    def __init__(self, store, builder=None):
        self.builder = builder or TreeBuilder(store)
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="tree-build")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def submit(self, criteria, progress_callback=None, cancel_event=None) -> Future:
        """Queue a build and return a Future resolving to the root node."""
        logger.debug("Queued build: %s", criteria.describe())
        return self._executor.submit(
            self.builder.build_tree, criteria, progress_callback, cancel_event)

    async def build_tree_async(self, criteria, progress_callback=None, cancel_event=None):
        """Await a build without blocking the event loop."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self._executor, self.builder.build_tree,
            criteria, progress_callback, cancel_event)

    def close(self, wait=True):
        self._executor.shutdown(wait=wait)
