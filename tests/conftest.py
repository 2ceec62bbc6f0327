"""Shared fixtures: plugin config and a TaskQuery factory for fake bridges."""

import pytest

from omnifocus_api import TaskQuery
from utils.config import PluginConfig


@pytest.fixture()
def config():
    return PluginConfig(
        short_threshold=5,
        script_timeout=1.0,
        default_refresh_interval=60,
        min_refresh_interval=5,
    )


@pytest.fixture()
def make_query(config):
    def _make(bridge, timeout=None):
        return TaskQuery(bridge, timeout=timeout if timeout is not None else config.script_timeout)

    return _make
