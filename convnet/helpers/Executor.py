# convnet/helpers/Executor.py
import atexit
import logging
import os
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait

from ..errors import ConfigError

logger = logging.getLogger(__name__)


class SequentialExecutor:
    """Runs fn(channel) for every channel in order on the calling thread."""

    def map_channels(self, fn, count):
        for channel in range(count):
            fn(channel)

    def __repr__(self):
        return "SequentialExecutor()"


class ThreadedExecutor:
    """
    Fans fn(channel) out to a thread pool and joins before returning.

    Only safe for work whose channels write disjoint regions.
    NumPy releases the GIL inside its kernels, so channels overlap for real.
    """

    def __init__(self, max_workers=None):
        self.max_workers = max_workers
        self._pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="convnet")

    def map_channels(self, fn, count):
        futures = [self._pool.submit(fn, channel) for channel in range(count)]
        _, pending = wait(futures, return_when=FIRST_EXCEPTION)
        if pending:
            # a channel failed: drop queued channels, let running ones finish
            for f in pending:
                f.cancel()
            wait(pending)
        # result() re-raises a worker's exception
        for f in futures:
            if not f.cancelled():
                f.result()

    def shutdown(self):
        self._pool.shutdown(wait=True)

    def __repr__(self):
        return f"ThreadedExecutor(max_workers={self.max_workers})"


def make_executor(setting):
    """
    Build an executor from a setting string:
      "sequential" | "threads" | "threads:N"
    """
    setting = (setting or "sequential").strip().lower()
    if setting == "sequential":
        return SequentialExecutor()
    if setting == "threads":
        return ThreadedExecutor()
    if setting.startswith("threads:"):
        try:
            workers = int(setting.split(":", 1)[1])
        except ValueError:
            raise ConfigError(f"invalid worker count in executor setting {setting!r}") from None
        if workers < 1:
            raise ConfigError(f"executor needs at least one worker, got {workers}")
        return ThreadedExecutor(max_workers=workers)
    raise ConfigError(f"unknown executor setting {setting!r}")


def executor_from_env(environ=None):
    """Executor named by CONVNET_EXECUTOR (default "sequential")."""
    environ = os.environ if environ is None else environ
    return make_executor(environ.get("CONVNET_EXECUTOR", "sequential"))


# Global executor instance, decided once per process
default_executor = executor_from_env()
if isinstance(default_executor, ThreadedExecutor):
    # the process owns the shared pool
    atexit.register(default_executor.shutdown)
logger.debug("Channel executor: %r", default_executor)
