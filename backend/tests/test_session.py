"""Engine options per database backend."""

from __future__ import annotations

from app.db.session import _engine_options


def test_sqlite_engines_use_default_pool() -> None:
    assert _engine_options("sqlite+aiosqlite:///./game.db") == {}


def test_postgres_engines_pre_ping_connections() -> None:
    options = _engine_options("postgresql+asyncpg://game:secret@db/game")
    assert options["pool_pre_ping"] is True
    assert options["pool_recycle"] == 1800
