"""Background execution for deferred replies and cron jobs."""
import asyncio
import inspect
import threading
from typing import Callable, List

from .observability import init_observability

logger, _ = init_observability('discord-router-background')


def run_sync(value):
    """Return ``value``, awaiting it first when it is awaitable."""
    if inspect.isawaitable(value):
        return asyncio.run(_await(value))
    return value


async def _await(awaitable):
    return await awaitable


class ExecutionContext:
    """Capability to keep work running after the HTTP response is returned."""

    def wait_until(self, task: Callable, *args):
        raise NotImplementedError


class ThreadExecutionContext(ExecutionContext):
    """Runs each submitted task on its own daemon thread.

    The hosting platform must keep the instance alive (CPU always allocated)
    until the threads finish; ``join`` is available for tests and shutdown.
    """

    def __init__(self, correlation_id: str = None):
        self.correlation_id = correlation_id
        self._threads: List[threading.Thread] = []

    def wait_until(self, task: Callable, *args):
        thread = threading.Thread(target=self._run, args=(task, args), daemon=True)
        self._threads.append(thread)
        thread.start()
        return thread

    def _run(self, task: Callable, args: tuple):
        try:
            run_sync(task(*args))
        except Exception as e:
            logger.error(
                "Background task failed",
                error=e,
                correlation_id=self.correlation_id,
                task=getattr(task, '__name__', repr(task))
            )

    def join(self, timeout: float = None):
        for thread in self._threads:
            thread.join(timeout)
