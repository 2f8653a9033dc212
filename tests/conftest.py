"""
Shared pytest fixtures for the gadgetmeta test suite.

Usage in tests:
    def test_something(handler, processor):
        processor.delays["http://a"] = 0.2
        response = handler.process(make_request("http://a"))
"""

import pytest

from gadgetmeta.config import ENV_OVERRIDES, ConfigManager
from gadgetmeta.orchestrator import PoolConfig, WorkerPool, reset_pool
from gadgetmeta.rpc import JsonRpcHandler
from tests.factories import SAMPLE_SPEC_XML, StubProcessor, StubUriBuilder


@pytest.fixture
def pool():
    """Private worker pool, shut down after the test."""
    worker_pool = WorkerPool(PoolConfig(workers=4))
    yield worker_pool
    worker_pool.shutdown(wait=True)


@pytest.fixture
def processor():
    """Stub processor; tests script delays and failures on it."""
    return StubProcessor()


@pytest.fixture
def handler(processor, pool):
    """Handler over the stub processor and a private pool."""
    return JsonRpcHandler(processor=processor, uri_builder=StubUriBuilder(), pool=pool)


@pytest.fixture
def spec_file(tmp_path):
    """Sample gadget spec written to disk."""
    path = tmp_path / "weather.xml"
    path.write_text(SAMPLE_SPEC_XML, encoding="utf-8")
    return path


@pytest.fixture
def clean_env(monkeypatch):
    """Remove GADGETMETA_* overrides inherited from the shell."""
    for key in list(ENV_OVERRIDES) + ["GADGETMETA_PROJECT_PATH"]:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def config_manager(tmp_path, clean_env):
    """ConfigManager isolated from the real home directory."""
    return ConfigManager(tmp_path, user_config_path=tmp_path / "home" / "config.yaml")


@pytest.fixture(autouse=True)
def reset_global_pool():
    """Reset the process-wide pool around each test."""
    reset_pool()
    yield
    reset_pool()
