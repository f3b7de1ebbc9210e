from __future__ import annotations

import pytest

from adapters.gotify_client import GotifyCounter
from core import config
from core.config import AppSettings
from core.domain.models import EndpointConfig

BASE_URL = "http://gotify.test"
ACCESS_KEY = "C7s2xUq9TESTKEY"


def message_page(size: int, since: int, limit: int = 200) -> dict:
    return {
        "messages": [{"id": since + i, "message": "m"} for i in range(size)],
        "paging": {"size": size, "since": since, "limit": limit},
    }


@pytest.fixture(autouse=True)
def _env_isolation(monkeypatch, tmp_path):
    for name in (
        "GOTIFY_WIDGET_URL",
        "GOTIFY_WIDGET_KEY",
        "GOTIFY_WIDGET_MAX_PAGES",
        "GOTIFY_WIDGET_HTTP_TIMEOUT_SECONDS",
        "GOTIFY_WIDGET_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    # AppSettings also reads `.env` from the working directory and the
    # user config `.env` resolved at import time; point both at tmp_path.
    monkeypatch.chdir(tmp_path)
    user_dir = tmp_path / "user-config"
    monkeypatch.setattr(config, "get_user_config_dir", lambda: user_dir)
    monkeypatch.setitem(AppSettings.model_config, "env_file", (".env", str(user_dir / ".env")))


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(_env_file=None, url=BASE_URL, key=ACCESS_KEY)


@pytest.fixture
def endpoint() -> EndpointConfig:
    return EndpointConfig.build(base_url=BASE_URL, access_key=ACCESS_KEY)


@pytest.fixture
def counter(endpoint, settings):
    with GotifyCounter(endpoint, settings) as c:
        yield c
