import logging
import threading
import time

import pytest

from nuscenes_data import LoaderConfig
from nuscenes_data.utils import fork_join, parallel_map, time_block


def test_fork_join_preserves_order():
    assert fork_join([lambda i=i: i * i for i in range(10)], max_workers=4) == [i * i for i in range(10)]


def test_fork_join_empty():
    assert fork_join([]) == []


def test_fork_join_raises_failure():
    def boom():
        raise KeyError("boom")

    with pytest.raises(KeyError):
        fork_join([lambda: 1, boom, lambda: 3])


def test_fork_join_cancels_pending_tasks():
    gate = threading.Event()
    started = []

    def blocker():
        gate.wait(5)
        return "slow"

    def boom():
        try:
            raise RuntimeError("first")
        finally:
            gate.set()

    def later(i):
        started.append(i)
        time.sleep(0.05)

    with pytest.raises(RuntimeError, match="first"):
        fork_join([blocker, boom] + [lambda i=i: later(i) for i in range(50)], max_workers=2)
    assert len(started) < 50


def test_parallel_map():
    assert parallel_map(str.upper, ["a", "b", "c"], max_workers=2) == ["A", "B", "C"]


def test_time_block_logs(caplog):
    logger = logging.getLogger("nuscenes_data.test")
    with caplog.at_level(logging.DEBUG, logger="nuscenes_data.test"):
        with time_block(logger, "Step"):
            pass
    assert caplog.records[-1].getMessage().startswith("Step took")


def test_config_defaults():
    config = LoaderConfig()
    assert config.check is True
    assert config.max_workers is None


def test_config_from_env(monkeypatch):
    monkeypatch.setenv("NUSCENES_DATA_CHECK", "off")
    monkeypatch.setenv("NUSCENES_DATA_MAX_WORKERS", "3")
    config = LoaderConfig.from_env()
    assert config.check is False
    assert config.max_workers == 3


def test_config_rejects_zero_workers():
    with pytest.raises(ValueError):
        LoaderConfig(max_workers=0)
