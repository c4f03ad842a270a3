"""Tests for the modserve command line."""

import asyncio
import json

import pytest

from modserve.cli import main, parse_args
from modserve.store import FetchOutcome, SQLiteStore


class TestParseArgs:
    """Tests for argument parsing."""

    def test_serve_options(self):
        """Test global and serve options land in upper-case dests."""
        args = parse_args([
            "--db", "x.db", "--experiment", "not-at-v1", "--loglevel", "debug",
            "serve", "--host", "0.0.0.0", "--port", "9000",
        ])
        assert args.COMMAND == "serve"
        assert args.DB_PATH == "x.db"
        assert args.EXPERIMENTS == ["not-at-v1"]
        assert args.LOG_LEVEL == "DEBUG"
        assert args.HOST == "0.0.0.0"
        assert args.PORT == 9000

    def test_command_required(self):
        """Test a subcommand must be given."""
        with pytest.raises(SystemExit):
            parse_args([])


class TestResolveCommand:
    """Tests for the resolve subcommand."""

    def test_unknown_path(self, tmp_path, capsys):
        """Test an empty database offers a fetch."""
        rc = main(["--db", str(tmp_path / "x.db"), "resolve", "unknown.org/x@v1.0.0"])

        assert rc == 0
        assert json.loads(capsys.readouterr().out) == {
            "directive": "FetchPrompt",
            "normalized_path": "unknown.org/x@v1.0.0",
        }

    def test_recorded_redirect(self, tmp_path, capsys):
        """Test a recorded alternative module is reported as a redirect."""
        db = tmp_path / "x.db"
        store = SQLiteStore(db)
        asyncio.run(store.record_fetch_outcome(FetchOutcome(
            module_path="example.com/foo",
            requested_version="v1.2.3",
            status=490,
            go_mod_path="example.com",
            error="module is in example.com",
        )))
        asyncio.run(store.close())

        rc = main(["--db", str(db), "resolve", "example.com/foo@v1.2.3"])

        assert rc == 0
        result = json.loads(capsys.readouterr().out)
        assert result["directive"] == "TemporaryRedirect"
        assert result["target"] == "/example.com"
        assert result["flash_value"] == "example.com/foo"

    def test_invalid_version(self, tmp_path, capsys):
        """Test a bad version is reported as a 400 page."""
        rc = main(["--db", str(tmp_path / "x.db"), "resolve", "example.com/foo@master"])

        assert rc == 0
        result = json.loads(capsys.readouterr().out)
        assert result["directive"] == "ErrorPage"
        assert result["status"] == 400
