import pytest


@pytest.fixture(autouse=True)
def _isolated_cache_dir(monkeypatch, tmp_path):
    # Never touch the user's scan cache from tests.
    monkeypatch.setenv("IFACEMAKER_CACHE_DIR", str(tmp_path / "ifacemaker-cache"))
    yield
