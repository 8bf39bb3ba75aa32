import threading
import time

import pytest

from convnet import ConfigError
from convnet.helpers.Executor import (
    SequentialExecutor,
    ThreadedExecutor,
    default_executor,
    executor_from_env,
    make_executor,
)


def test_sequential_runs_in_order():
    seen = []
    SequentialExecutor().map_channels(seen.append, 5)
    assert seen == [0, 1, 2, 3, 4]


def test_threaded_runs_every_channel_before_returning():
    seen = set()
    lock = threading.Lock()

    def work(channel):
        with lock:
            seen.add(channel)

    ex = ThreadedExecutor(max_workers=3)
    try:
        ex.map_channels(work, 16)
    finally:
        ex.shutdown()
    assert seen == set(range(16))


def test_threaded_reraises_worker_error():
    def work(channel):
        if channel == 2:
            raise ValueError("boom")

    ex = ThreadedExecutor(max_workers=2)
    try:
        with pytest.raises(ValueError, match="boom"):
            ex.map_channels(work, 4)
    finally:
        ex.shutdown()


@pytest.mark.parametrize(
    "setting, kind, workers",
    [
        ("sequential", SequentialExecutor, None),
        ("", SequentialExecutor, None),
        ("threads", ThreadedExecutor, None),
        ("Threads:3", ThreadedExecutor, 3),
    ],
)
def test_make_executor(setting, kind, workers):
    ex = make_executor(setting)
    assert isinstance(ex, kind)
    if workers is not None:
        assert ex.max_workers == workers
    if isinstance(ex, ThreadedExecutor):
        ex.shutdown()


@pytest.mark.parametrize("setting", ["gpu", "threads:x", "threads:0"])
def test_make_executor_rejects_bad_settings(setting):
    with pytest.raises(ConfigError):
        make_executor(setting)


def test_threaded_failure_cancels_queued_channels():
    seen = set()
    lock = threading.Lock()

    def work(channel):
        if channel == 0:
            raise RuntimeError("channel 0 failed")
        time.sleep(0.05)
        with lock:
            seen.add(channel)

    ex = ThreadedExecutor(max_workers=1)
    try:
        with pytest.raises(RuntimeError, match="channel 0"):
            ex.map_channels(work, 20)
        # nothing keeps running after map_channels returned
        finished = set(seen)
        time.sleep(0.1)
        assert seen == finished
    finally:
        ex.shutdown()
    assert len(seen) < 19


@pytest.mark.parametrize(
    "environ, kind, workers",
    [
        ({}, SequentialExecutor, None),
        ({"CONVNET_EXECUTOR": "sequential"}, SequentialExecutor, None),
        ({"CONVNET_EXECUTOR": "threads:2"}, ThreadedExecutor, 2),
    ],
)
def test_executor_from_env(monkeypatch, environ, kind, workers):
    monkeypatch.delenv("CONVNET_EXECUTOR", raising=False)
    for key, value in environ.items():
        monkeypatch.setenv(key, value)
    ex = executor_from_env()
    assert isinstance(ex, kind)
    if workers is not None:
        assert ex.max_workers == workers
        ex.shutdown()


def test_executor_from_env_rejects_unknown(monkeypatch):
    monkeypatch.setenv("CONVNET_EXECUTOR", "gpu")
    with pytest.raises(ConfigError):
        executor_from_env()


def test_default_executor_follows_test_environment():
    assert isinstance(default_executor, SequentialExecutor)
