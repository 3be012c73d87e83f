import pytest
from typer.testing import CliRunner

from cli import main as cli_main
from cli.main import app, program_name, read_hostname_file, resolve_families
from conftest import FakeResolver
from core.config import ResolverBackend

runner = CliRunner()


@pytest.fixture
def factory_args(monkeypatch):
    """Swap the real resolver backends for the in-memory fake."""

    captured: dict = {}

    def fake_build(settings=None, **kwargs):
        captured.update(kwargs)
        return FakeResolver

    monkeypatch.setattr(cli_main, "build_resolver_factory", fake_build)
    return captured


def test_resolve_prints_one_line_per_address(factory_args) -> None:
    result = runner.invoke(app, ["resolve", "localhost"])
    assert result.exit_code == 0, result.output
    assert "localhost\t127.0.0.1" in result.output
    assert "localhost\t::1" in result.output


def test_ipv4_flag_filters_out_ipv6(factory_args) -> None:
    result = runner.invoke(app, ["resolve", "-4", "dual.example"])
    assert result.exit_code == 0, result.output
    assert "dual.example\t192.0.2.10" in result.output
    assert "2001:db8::10" not in result.output


def test_ipv6_flag_filters_out_ipv4(factory_args) -> None:
    result = runner.invoke(app, ["resolve", "-6", "dual.example"])
    assert result.exit_code == 0, result.output
    assert "dual.example\t2001:db8::10" in result.output
    assert "192.0.2.10" not in result.output


def test_failure_exit_code_and_notice(factory_args) -> None:
    result = runner.invoke(app, ["resolve", "-w", "2", "nonexistent.invalid.test"])
    assert result.exit_code == 2
    assert "ERROR: nonexistent.invalid.test: Name or service not known" in result.output
    assert "NOTICE: Some hostnames could not be resolved." in result.output


def test_partial_failure_still_prints_successes(factory_args) -> None:
    result = runner.invoke(app, ["resolve", "--workers", "3", "a.example", "nope.invalid", "b.example"])
    assert result.exit_code == 2
    assert "a.example\t192.0.2.1" in result.output
    assert "b.example\t192.0.2.2" in result.output
    assert "ERROR: nope.invalid:" in result.output


def test_missing_hostnames_exit_code(factory_args) -> None:
    result = runner.invoke(app, ["resolve"])
    assert result.exit_code == 1
    assert "ERROR: Missing hostname arguments." in result.output


def test_negative_workers_is_a_usage_error(factory_args) -> None:
    result = runner.invoke(app, ["resolve", "-w", "-1", "a.example"])
    assert result.exit_code == 2
    assert "a.example\t" not in result.output


def test_hostnames_from_file(factory_args, tmp_path) -> None:
    listing = tmp_path / "hosts.txt"
    listing.write_text("# inventory\na.example\n\nb.example  # web\n", encoding="utf-8")

    result = runner.invoke(app, ["resolve", "-f", str(listing), "c.example"])
    assert result.exit_code == 0, result.output
    for host in ("a.example", "b.example", "c.example"):
        assert f"{host}\t" in result.output


def test_hostnames_from_stdin(factory_args) -> None:
    result = runner.invoke(app, ["resolve", "--file", "-"], input="a.example\nb.example\n")
    assert result.exit_code == 0, result.output
    assert "a.example\t192.0.2.1" in result.output
    assert "b.example\t192.0.2.2" in result.output


def test_backend_and_timeout_are_forwarded(factory_args) -> None:
    result = runner.invoke(
        app,
        [
            "resolve",
            "--backend",
            "dnspython",
            "--nameserver",
            "192.0.2.53",
            "--timeout",
            "0",
            "localhost",
        ],
    )
    assert result.exit_code == 0, result.output
    assert factory_args["backend"] is ResolverBackend.DNSPYTHON
    assert factory_args["nameservers"] == ["192.0.2.53"]
    assert factory_args["timeout"] is None


def test_default_workers_from_environment(factory_args, monkeypatch) -> None:
    seen: list[str] = []

    class Tracking(FakeResolver):
        def __init__(self, *, inline: bool = False) -> None:
            super().__init__(calls=seen, inline=inline)

    monkeypatch.setattr(cli_main, "build_resolver_factory", lambda settings=None, **kw: Tracking)
    monkeypatch.setenv("HOSTRESOLVE_DEFAULT_WORKERS", "2")

    result = runner.invoke(app, ["resolve", "a.example", "b.example"])
    assert result.exit_code == 0, result.output
    assert {thread for _, thread in seen} == {"resolver-0", "resolver-1"}


def test_resolve_families_defaults_to_both() -> None:
    assert resolve_families(False, False) == (True, True)
    assert resolve_families(True, True) == (True, True)
    assert resolve_families(True, False) == (True, False)
    assert resolve_families(False, True) == (False, True)


def test_read_hostname_file_skips_comments(tmp_path) -> None:
    listing = tmp_path / "hosts.txt"
    listing.write_text("  x.example \n#y.example\n", encoding="utf-8")
    assert read_hostname_file(listing) == ["x.example"]


def test_program_name_uses_argv_stem(monkeypatch) -> None:
    monkeypatch.setattr(cli_main.sys, "argv", ["/usr/local/bin/hostresolve.py"])
    assert program_name() == "hostresolve"


def test_nameserver_requires_the_dnspython_backend(factory_args) -> None:
    result = runner.invoke(app, ["resolve", "--nameserver", "192.0.2.53", "localhost"])
    assert result.exit_code == 2
    assert "--nameserver" in result.output
    assert "localhost\t" not in result.output


def test_nameserver_accepted_when_settings_select_dnspython(factory_args, monkeypatch) -> None:
    monkeypatch.setenv("HOSTRESOLVE_RESOLVER_BACKEND", "dnspython")
    result = runner.invoke(app, ["resolve", "--nameserver", "192.0.2.53", "localhost"])
    assert result.exit_code == 0, result.output
    assert factory_args["nameservers"] == ["192.0.2.53"]


def test_invalid_log_level_in_environment_is_a_usage_error(factory_args, monkeypatch) -> None:
    monkeypatch.setenv("HOSTRESOLVE_LOG_LEVEL", "verbose")
    result = runner.invoke(app, ["resolve", "localhost"])
    assert result.exit_code == 2
    assert "invalid configuration" in result.output
    assert not isinstance(result.exception, ValueError)
    assert "localhost\t" not in result.output


def test_log_level_from_environment_is_case_insensitive(factory_args, monkeypatch) -> None:
    monkeypatch.setenv("HOSTRESOLVE_LOG_LEVEL", "info")
    result = runner.invoke(app, ["resolve", "localhost"])
    assert result.exit_code == 0, result.output
