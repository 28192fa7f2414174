"""wmarket CLI against a throwaway DuckDB ledger."""

import re

import pytest
from typer.testing import CliRunner

from whispermarket.cli.app import app

runner = CliRunner()


@pytest.fixture
def config_dir(tmp_path):
    d = tmp_path / "config"
    d.mkdir()
    db_path = (tmp_path / "cli.duckdb").as_posix()
    (d / "default.toml").write_text(
        f'[storage]\nbackend = "duckdb"\ndb_path = "{db_path}"\n\n[logging]\nlevel = "WARNING"\n'
    )
    return d


def _invoke(config_dir, *args):
    return runner.invoke(app, ["--config-dir", str(config_dir), *args])


def _create(config_dir, *extra):
    r = _invoke(config_dir, "markets", "create", "-q", "Will it snow?", "--creator", "0xC", *extra)
    assert r.exit_code == 0, r.output
    return re.search(r"Created market (\S+)", r.output).group(1)


def test_create_bet_resolve(config_dir):
    market_id = _create(config_dir, "--tag", "weather")

    r = _invoke(config_dir, "bets", "place", market_id, "--bettor", "0xA", "--yes", "--amount", "1000000000000000000")
    assert r.exit_code == 0, r.output
    r = _invoke(config_dir, "bets", "place", market_id, "--bettor", "0xB", "--no", "--amount", "3000000000000000000")
    assert r.exit_code == 0, r.output

    r = _invoke(config_dir, "markets", "show", market_id)
    assert r.exit_code == 0, r.output
    assert "yes: 1.00 ETH (25%)" in r.output

    r = _invoke(config_dir, "markets", "resolve", market_id, "--no")
    assert r.exit_code == 0, r.output
    r = _invoke(config_dir, "bets", "position", market_id, "--bettor", "0xB")
    assert "Can claim winnings." in r.output

    r = _invoke(config_dir, "markets", "list", "--resolved")
    assert market_id in r.output
    assert "Total: 1 markets" in r.output


def test_errors_exit_nonzero(config_dir):
    r = _invoke(config_dir, "markets", "show", "market_0_nope")
    assert r.exit_code == 1
    assert "not_found" in r.output

    market_id = _create(config_dir, "--visibility", "private", "--allow", "0xA")
    r = _invoke(config_dir, "bets", "place", market_id, "--bettor", "0xZ", "--yes", "--amount", "1")
    assert r.exit_code == 1
    assert "access_denied" in r.output


def test_delete(config_dir):
    market_id = _create(config_dir)
    r = _invoke(config_dir, "markets", "delete", market_id, "--force")
    assert r.exit_code == 0, r.output
    r = _invoke(config_dir, "markets", "list")
    assert "Total: 0 markets" in r.output
