"""Doctor commands for environment diagnostics."""

from __future__ import annotations

import asyncio
import json
import threading

import typer
from pydantic import ValidationError
from rich.console import Console

from adapters.system_resolver import SystemResolver
from cli.ui_components import build_doctor_table, status_label
from core.config import AppSettings, ResolverBackend, write_user_env_vars
from core.domain.errors import ResolutionError

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()

# Settings that `doctor set` accepts, mapped to their env var.
SETTABLE_KEYS: dict[str, str] = {
    "lookup_timeout_seconds": "HOSTRESOLVE_LOOKUP_TIMEOUT_SECONDS",
    "default_workers": "HOSTRESOLVE_DEFAULT_WORKERS",
    "resolver_backend": "HOSTRESOLVE_RESOLVER_BACKEND",
    "nameservers": "HOSTRESOLVE_NAMESERVERS",
    "log_level": "HOSTRESOLVE_LOG_LEVEL",
}


def load_settings() -> AppSettings:
    """Current settings; a bad environment or .env value is a usage error, not a crash."""

    try:
        return AppSettings()
    except ValidationError as exc:
        raise typer.BadParameter(f"invalid configuration: {exc}") from exc


async def _check_system_resolver(hostname: str) -> tuple[bool, str]:
    resolver = SystemResolver(timeout=5.0)
    try:
        addresses = await resolver.resolve(hostname)
    except ResolutionError as exc:
        return False, exc.message
    finally:
        await resolver.close()
    return True, ", ".join(str(a) for a in addresses)


def _check_dnspython() -> tuple[bool, str]:
    try:
        import dns.version  # noqa: PLC0415
    except ImportError as exc:
        return False, str(exc)
    return True, f"dnspython {dns.version.version}"


def _check_threaded_loops(count: int = 2) -> tuple[bool, str]:
    """Run one event loop per thread, the way worker contexts do."""

    errors: list[str] = []

    def worker() -> None:
        try:
            asyncio.run(asyncio.sleep(0))
        except RuntimeError as exc:
            errors.append(str(exc))

    threads = [threading.Thread(target=worker) for _ in range(count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    if errors:
        return False, errors[0]
    return True, f"{count} loops on {count} threads"


@app.command()
def run() -> None:
    """Run baseline diagnostics."""

    settings = load_settings()

    table = build_doctor_table()

    table.add_row("Backend", "OK", settings.resolver_backend.value)
    timeout = settings.lookup_timeout_seconds
    table.add_row("Lookup timeout", "OK", "disabled" if timeout is None else f"{timeout:g}s")
    table.add_row("Default workers", "OK", str(settings.default_workers))
    if settings.resolver_backend is ResolverBackend.DNSPYTHON:
        table.add_row("Nameservers", "OK", ", ".join(settings.nameservers) or "system config")

    ok_sys, detail_sys = asyncio.run(_check_system_resolver("localhost"))
    table.add_row("System resolver (localhost)", status_label(ok_sys), detail_sys)

    ok_dns, detail_dns = _check_dnspython()
    table.add_row("dnspython", status_label(ok_dns), detail_dns)

    ok_loops, detail_loops = _check_threaded_loops()
    table.add_row("Threaded event loops", status_label(ok_loops), detail_loops)

    _console.print(table)

    if not ok_sys:
        _console.print(
            "\n[yellow]Note:[/yellow] localhost did not resolve; check /etc/hosts or nsswitch."
        )


@app.command(name="set")
def set_value(
    key: str = typer.Argument(..., help=f"One of: {', '.join(SETTABLE_KEYS)}"),
    value: str = typer.Argument(..., help="New value (nameservers: comma separated)."),
) -> None:
    """Persist a setting in the user config .env."""

    env_key = SETTABLE_KEYS.get(key.strip().lower())
    if env_key is None:
        raise typer.BadParameter(f"unknown setting {key!r}", param_hint="KEY")

    field = key.strip().lower()
    candidate: object = value
    if env_key == "HOSTRESOLVE_NAMESERVERS":
        candidate = [s.strip() for s in value.split(",") if s.strip()]
        value = json.dumps(candidate)

    try:
        AppSettings(**{field: candidate})
    except ValidationError as exc:
        raise typer.BadParameter(str(exc), param_hint="VALUE") from exc

    env_path = write_user_env_vars({env_key: value})
    _console.print(f"[green]Saved {key} to:[/green] {env_path}")
