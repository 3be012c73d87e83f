from typer.testing import CliRunner

from cli.doctor import _check_threaded_loops
from cli.main import app
from core.config import _parse_env_lines, get_user_env_file

runner = CliRunner()


def test_doctor_run_reports_checks() -> None:
    result = runner.invoke(app, ["doctor", "run"])
    assert result.exit_code == 0, result.output
    assert "System resolver" in result.output
    assert "dnspython" in result.output


def test_threaded_loops_check() -> None:
    ok, detail = _check_threaded_loops(3)
    assert ok
    assert detail == "3 loops on 3 threads"


def test_doctor_set_persists_value() -> None:
    result = runner.invoke(app, ["doctor", "set", "default_workers", "6"])
    assert result.exit_code == 0, result.output

    data = _parse_env_lines(get_user_env_file().read_text(encoding="utf-8"))
    assert data["HOSTRESOLVE_DEFAULT_WORKERS"] == "6"


def test_doctor_set_nameservers_as_json_list() -> None:
    result = runner.invoke(app, ["doctor", "set", "nameservers", "192.0.2.53, 192.0.2.54"])
    assert result.exit_code == 0, result.output

    data = _parse_env_lines(get_user_env_file().read_text(encoding="utf-8"))
    assert data["HOSTRESOLVE_NAMESERVERS"] == '["192.0.2.53", "192.0.2.54"]'


def test_doctor_set_rejects_unknown_key() -> None:
    result = runner.invoke(app, ["doctor", "set", "colour", "blue"])
    assert result.exit_code == 2


def test_doctor_set_rejects_invalid_value() -> None:
    result = runner.invoke(app, ["doctor", "set", "default_workers", "5000"])
    assert result.exit_code == 2


def test_doctor_set_rejects_unknown_log_level() -> None:
    result = runner.invoke(app, ["doctor", "set", "log_level", "verbose"])
    assert result.exit_code == 2
    assert not get_user_env_file().exists()


def test_doctor_set_accepts_lowercase_log_level() -> None:
    result = runner.invoke(app, ["doctor", "set", "log_level", "debug"])
    assert result.exit_code == 0, result.output


def test_doctor_run_reports_bad_configuration(monkeypatch) -> None:
    monkeypatch.setenv("HOSTRESOLVE_LOG_LEVEL", "verbose")
    result = runner.invoke(app, ["doctor", "run"])
    assert result.exit_code == 2
    assert "invalid configuration" in result.output
