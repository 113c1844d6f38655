from datetime import timedelta

import pytest

from canteen.config import DEFAULT_SECRET_KEY, Settings
from canteen.main import create_app


@pytest.fixture
def env(monkeypatch, tmp_path):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'env.db'}")
    monkeypatch.setenv("DEBUG", "true")
    return monkeypatch


def test_rate_limit_windows_from_env(env):
    env.setenv("LOGIN_MAX_ATTEMPTS", "3")
    env.setenv("LOGIN_WINDOW_SECONDS", "30")
    env.setenv("API_MAX_REQUESTS", "50")
    env.setenv("API_WINDOW_SECONDS", "5")

    settings = Settings.from_env()
    assert settings.login_window_seconds == 30
    assert settings.api_window_seconds == 5

    context = create_app(settings).state.context
    assert context.login_limiter.max_attempts == 3
    assert context.login_limiter.window == timedelta(seconds=30)
    assert context.api_limiter.max_attempts == 50
    assert context.api_limiter.window == timedelta(seconds=5)
    context.close()


def test_window_defaults(env):
    env.delenv("LOGIN_WINDOW_SECONDS", raising=False)
    env.delenv("API_WINDOW_SECONDS", raising=False)
    settings = Settings.from_env()
    assert settings.login_window_seconds == 300
    assert settings.api_window_seconds == 60


def test_default_secret_refused_outside_debug(env):
    env.setenv("DEBUG", "false")
    env.setenv("SECRET_KEY", DEFAULT_SECRET_KEY)
    with pytest.raises(SystemExit):
        Settings.from_env()
