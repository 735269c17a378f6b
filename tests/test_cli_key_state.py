"""Tests for the 'key-state' CLI command group."""

import pytest
from typer.testing import CliRunner

from cli.main import app
from enforcer.db import KeyState, KeyStateRRState, get_connection, init_db

runner = CliRunner()


@pytest.fixture
def clean_db(tmp_path, monkeypatch):
    """Point the CLI at a fresh SQLite file for each test."""
    monkeypatch.setattr("enforcer.config.settings.workspace_dir", tmp_path)
    monkeypatch.setattr("enforcer.config.settings.storage_backend", "sqlite")
    return tmp_path / "kasp.db"


def _seed(state: KeyStateRRState, ttl: int = 3600) -> int:
    conn = get_connection()
    init_db(conn)
    try:
        ks = KeyState(conn)
        ks.state = state
        ks.ttl = ttl
        ks.create()
        return ks.id
    finally:
        conn.close()


def test_db_init(clean_db):
    result = runner.invoke(app, ["db", "init"])
    assert result.exit_code == 0
    assert "Database ready" in result.stdout
    assert clean_db.exists()


def test_create(clean_db):
    result = runner.invoke(
        app,
        ["key-state", "create", "--state", "rumoured", "--last-change", "1700000000",
         "--minimize", "--ttl", "300"],
    )
    assert result.exit_code == 0
    assert "Created key state 1" in result.stdout

    conn = get_connection()
    ks = KeyState(conn)
    ks.get_by_id(1)
    conn.close()
    assert ks.state is KeyStateRRState.RUMOURED
    assert ks.last_change == 1700000000
    assert ks.minimize == 1
    assert ks.ttl == 300


def test_create_bad_state(clean_db):
    result = runner.invoke(app, ["key-state", "create", "--state", "bogus"])
    assert result.exit_code == 1
    assert "Unknown RR state text" in result.stdout


def test_show(clean_db):
    ks_id = _seed(KeyStateRRState.OMNIPRESENT, ttl=7200)
    result = runner.invoke(app, ["key-state", "show", str(ks_id)])
    assert result.exit_code == 0
    assert "omnipresent" in result.stdout
    assert "ttl=7200" in result.stdout


def test_show_missing(clean_db):
    result = runner.invoke(app, ["key-state", "show", "99"])
    assert result.exit_code == 1
    assert "not found" in result.stdout


def test_list_all(clean_db):
    _seed(KeyStateRRState.HIDDEN)
    _seed(KeyStateRRState.NA)
    result = runner.invoke(app, ["key-state", "list"])
    assert result.exit_code == 0
    assert "hidden" in result.stdout
    assert "NA" in result.stdout


def test_list_by_ids_skips_missing(clean_db):
    first = _seed(KeyStateRRState.HIDDEN)
    _seed(KeyStateRRState.UNRETENTIVE)
    result = runner.invoke(app, ["key-state", "list", str(first), "42"])
    assert result.exit_code == 0
    assert "hidden" in result.stdout
    assert "unretentive" not in result.stdout


def test_list_empty(clean_db):
    result = runner.invoke(app, ["key-state", "list"])
    assert result.exit_code == 0
    assert "No key states found." in result.stdout


def test_set_state(clean_db):
    ks_id = _seed(KeyStateRRState.RUMOURED)
    result = runner.invoke(
        app, ["key-state", "set-state", str(ks_id), "omnipresent", "--last-change", "55"]
    )
    assert result.exit_code == 0
    assert "rumoured -> omnipresent" in result.stdout

    conn = get_connection()
    ks = KeyState(conn)
    ks.get_by_id(ks_id)
    conn.close()
    assert ks.state is KeyStateRRState.OMNIPRESENT
    assert ks.last_change == 55


def test_set_state_rejects_bad_text(clean_db):
    ks_id = _seed(KeyStateRRState.RUMOURED)
    result = runner.invoke(app, ["key-state", "set-state", str(ks_id), "gone"])
    assert result.exit_code == 1


def test_delete(clean_db):
    ks_id = _seed(KeyStateRRState.HIDDEN)
    result = runner.invoke(app, ["key-state", "delete", str(ks_id)])
    assert result.exit_code == 0

    result = runner.invoke(app, ["key-state", "show", str(ks_id)])
    assert result.exit_code == 1
