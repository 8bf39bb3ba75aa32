from .Backend import backend, Backend
from .Executor import SequentialExecutor, ThreadedExecutor, make_executor, executor_from_env, default_executor

__all__ = [
    "backend",
    "Backend",
    "SequentialExecutor",
    "ThreadedExecutor",
    "make_executor",
    "executor_from_env",
    "default_executor",
]
