"""Tests for the maintenance CLI."""

import json

import pytest

from shop import cli
from shop.exceptions import AuthError
from shop.remote import AuthUser


@pytest.fixture
def run(monkeypatch, fake_remote, tmp_path):
    """Run ``main`` against the in-memory remote."""
    monkeypatch.setattr(cli, "setup_logging", lambda **kwargs: None)
    monkeypatch.setattr(cli, "RemoteStoreClient", lambda: fake_remote)

    def _run(*argv):
        return cli.main(["--fallback-db", str(tmp_path / "fallback.db"), *argv])

    return _run


class TestParseArgs:
    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.parse_args([])

    def test_export_requires_output(self):
        with pytest.raises(SystemExit):
            cli.parse_args(["export"])

    def test_create_admin_args(self):
        args = cli.parse_args(["create-admin", "--email", "a@b.c", "--password", "pw"])
        assert args.command == "create-admin"
        assert args.email == "a@b.c"


class TestCheck:
    def test_check_writes_and_cleans_test_row(self, run, fake_remote, capsys):
        assert run("check") == 0

        assert fake_remote.tables["collections"] == []
        assert ("insert", "collections") in fake_remote.calls
        assert ("delete", "collections") in fake_remote.calls
        assert "cleanup ok" in capsys.readouterr().out

    def test_check_reports_read_failure(self, run, fake_remote, capsys):
        fake_remote.fail_all = True

        assert run("check") == 1
        assert "read FAILED" in capsys.readouterr().out

    def test_check_reports_write_failure(self, run, fake_remote):
        fake_remote.fail_on.add(("insert", "collections"))
        assert run("check") == 1


class TestShowConfig:
    def test_no_row(self, run, capsys):
        assert run("show-config") == 0
        assert "No site_config row" in capsys.readouterr().out

    def test_prints_row(self, run, fake_remote, capsys):
        fake_remote.seed("site_config", [{"id": 1, "site_name": "Joyas"}])

        assert run("show-config") == 0
        assert '"site_name": "Joyas"' in capsys.readouterr().out


class TestExportAndReset:
    def test_export_writes_snapshot(self, run, tmp_path):
        output = tmp_path / "out" / "catalog.json"

        assert run("export", "--output", str(output)) == 0

        data = json.loads(output.read_text(encoding="utf-8"))
        assert len(data["products"]) == 11
        assert data["collections"][0]["name"] == "Todas"

    def test_reset_requires_yes(self, run, fake_remote):
        assert run("reset") == 1
        assert fake_remote.writes() == []

    def test_reset(self, run, fake_remote):
        fake_remote.seed("collections", [{"name": "Vieja", "description": ""}])

        assert run("reset", "--yes") == 0

        names = [r["name"] for r in fake_remote.tables["collections"]]
        assert "Vieja" not in names
        assert "Aurora" in names

    def test_reset_failure_exit_code(self, run, fake_remote):
        fake_remote.fail_on.add(("delete", "products"))
        assert run("reset", "--yes") == 1


class FakeAdminAuth:
    def __init__(self, fail=False):
        self.fail = fail
        self.closed = False

    def create_user(self, email, password):
        if self.fail:
            raise AuthError("SUPABASE_SERVICE_KEY is required to create users")
        return AuthUser(id="u1", email=email)

    def close(self):
        self.closed = True


class TestCreateAdmin:
    def test_creates_user(self, run, monkeypatch, capsys):
        auth = FakeAdminAuth()
        monkeypatch.setattr(cli, "AuthClient", lambda: auth)

        assert run("create-admin", "--email", "admin@example.com", "--password", "pw") == 0
        assert "admin@example.com" in capsys.readouterr().out
        assert auth.closed

    def test_reports_failure(self, run, monkeypatch, capsys):
        monkeypatch.setattr(cli, "AuthClient", lambda: FakeAdminAuth(fail=True))

        assert run("create-admin", "--email", "admin@example.com", "--password", "pw") == 1
        assert "SUPABASE_SERVICE_KEY" in capsys.readouterr().out
