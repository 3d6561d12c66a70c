"""Tests for the command-line entrypoint."""

from __future__ import annotations

import pytest

from emotion_wellbeing import main as cli
from emotion_wellbeing.auth import SESSION_KEY
from emotion_wellbeing.config import get_settings


@pytest.fixture
async def signed_in(store):
    await store.put_string(SESSION_KEY, "Bearer tok-cli")
    return store


# ── refresh ───────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_refresh_ready_exits_zero(signed_in, make_pipeline, capsys):
    pipeline = make_pipeline()

    code = await cli._refresh(pipeline)
    await pipeline.close()

    out = capsys.readouterr().out
    assert code == 0
    assert "Mood: calm" in out
    assert "Usage (mins)" in out


@pytest.mark.asyncio
async def test_refresh_failure_exits_one(signed_in, make_pipeline, fitness_api, capsys):
    fitness_api.routes["/api/fitness/sleep"] = (500, {})

    code = await cli._refresh(make_pipeline())

    assert code == 1
    assert "Error: Fitness: 200, Sleep: 500" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_refresh_without_session_exits_one(store, make_pipeline, capsys):
    code = await cli._refresh(make_pipeline())

    assert code == 1
    assert "emotion-wellbeing login" in capsys.readouterr().err


# ── callback / logout ─────────────────────────────────────────


@pytest.mark.asyncio
async def test_callback_success(store, make_pipeline, capsys):
    code = await cli._callback(make_pipeline(), "emotionwellbeing://auth-success?token=cli")

    assert code == 0
    assert "Login successful!" in capsys.readouterr().out
    assert await store.get_string(SESSION_KEY) == "Bearer cli"


@pytest.mark.asyncio
async def test_callback_without_token(store, make_pipeline, capsys):
    code = await cli._callback(make_pipeline(), "emotionwellbeing://auth-success")

    assert code == 1
    assert "Login failed: token missing" in capsys.readouterr().err
    assert await store.get_string(SESSION_KEY) is None


@pytest.mark.asyncio
async def test_logout(signed_in, make_pipeline, capsys):
    pipeline = make_pipeline()

    assert await cli._logout(pipeline) == 0
    assert await cli._logout(pipeline) == 0

    out = capsys.readouterr().out
    assert "Logged out." in out
    assert "No session stored." in out


# ── argument handling ─────────────────────────────────────────


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    monkeypatch.setenv("EMOTION_WELLBEING_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}")
    monkeypatch.setattr(cli, "setup_logging", lambda *args, **kwargs: None)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_main_logout_with_empty_database(cli_env, capsys):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["logout"])

    assert exc_info.value.code == 0
    assert "No session stored." in capsys.readouterr().out


def test_main_without_command_prints_help(cli_env, capsys):
    with pytest.raises(SystemExit) as exc_info:
        cli.main([])

    assert exc_info.value.code == 1
    assert "emotion-wellbeing" in capsys.readouterr().out
