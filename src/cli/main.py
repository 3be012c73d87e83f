"""hostresolve command line.

The CLI is glue only: it turns flags into a validated `ResolutionConfig`,
runs the engine and maps the aggregate outcome to an exit code.
"""

from __future__ import annotations

import sys
from importlib.metadata import PackageNotFoundError, version as package_version
from pathlib import Path
from typing import Iterable, List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console

from adapters.resolver_factory import build_resolver_factory
from cli import doctor
from cli.ui_components import print_failure_notice
from core.config import ResolverBackend
from core.domain.models import ResolutionConfig
from core.log_setup import configure_logging
from core.services.resolution_engine import ResolutionEngine

EXIT_MISSING_HOSTNAMES = 1
EXIT_UNRESOLVED = 2

app = typer.Typer(
    no_args_is_help=True,
    help="Resolve hostnames to IP addresses, optionally in parallel.",
)
app.add_typer(doctor.app, name="doctor")

_err_console = Console(stderr=True)


def program_name() -> str:
    """Stem of the invoked executable, used as prefix of the failure notice."""

    argv0 = sys.argv[0] if sys.argv and sys.argv[0] else "hostresolve"
    return Path(argv0).stem or "hostresolve"


def read_hostname_file(path: Path) -> list[str]:
    """One hostname per line; blank lines and `#` comments are skipped. `-` is stdin."""

    if str(path) == "-":
        text = sys.stdin.read()
    else:
        text = path.read_text(encoding="utf-8")
    return _clean_lines(text.splitlines())


def _clean_lines(lines: Iterable[str]) -> list[str]:
    out: list[str] = []
    for raw in lines:
        line = raw.split("#", 1)[0].strip()
        if line:
            out.append(line)
    return out


def resolve_families(ipv4: bool, ipv6: bool) -> tuple[bool, bool]:
    """Neither flag (or both) means both families."""

    if not ipv4 and not ipv6:
        return True, True
    return ipv4, ipv6


@app.command()
def resolve(
    hostnames: Optional[List[str]] = typer.Argument(None, help="Hostnames to resolve."),
    ipv4: bool = typer.Option(False, "-4", "--ipv4", help="Print IPv4 addresses only."),
    ipv6: bool = typer.Option(False, "-6", "--ipv6", help="Print IPv6 addresses only."),
    workers: Optional[int] = typer.Option(
        None,
        "-w",
        "--workers",
        min=0,
        help="Concurrent worker contexts (0 = synchronous). Defaults to HOSTRESOLVE_DEFAULT_WORKERS.",
    ),
    input_file: Optional[Path] = typer.Option(
        None,
        "-f",
        "--file",
        help="Read additional hostnames from a file ('-' for stdin).",
    ),
    backend: Optional[ResolverBackend] = typer.Option(
        None,
        "--backend",
        case_sensitive=False,
        help="Resolver backend (system or dnspython).",
    ),
    nameservers: Optional[List[str]] = typer.Option(
        None,
        "--nameserver",
        help="Nameserver for the dnspython backend (repeatable).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        min=0.0,
        help="Per-lookup timeout in seconds (0 disables it).",
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Log diagnostics to stderr."),
) -> None:
    """Resolve HOSTNAMES and print one `hostname<TAB>address` line per address."""

    settings = doctor.load_settings()
    configure_logging("DEBUG" if verbose else settings.log_level, console=_err_console)

    names = list(hostnames or [])
    if input_file is not None:
        try:
            names.extend(read_hostname_file(input_file))
        except OSError as exc:
            raise typer.BadParameter(str(exc), param_hint="--file") from exc

    if not names:
        typer.echo("ERROR: Missing hostname arguments.", err=True)
        raise typer.Exit(code=EXIT_MISSING_HOSTNAMES)

    include_v4, include_v6 = resolve_families(ipv4, ipv6)
    try:
        config = ResolutionConfig(
            hostnames=names,
            include_v4=include_v4,
            include_v6=include_v6,
            worker_count=settings.default_workers if workers is None else workers,
        )
    except ValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc

    if nameservers and (backend or settings.resolver_backend) is ResolverBackend.SYSTEM:
        raise typer.BadParameter(
            "the system backend uses the OS resolver configuration; add --backend dnspython",
            param_hint="--nameserver",
        )

    factory_kwargs: dict = {"backend": backend, "nameservers": nameservers}
    if timeout is not None:
        factory_kwargs["timeout"] = timeout or None
    engine = ResolutionEngine(
        settings=settings,
        resolver_factory=build_resolver_factory(settings, **factory_kwargs),
    )

    if not engine.execute(config):
        print_failure_notice(_err_console, program_name())
        raise typer.Exit(code=EXIT_UNRESOLVED)


@app.command()
def version() -> None:
    """Print the installed version."""

    try:
        typer.echo(package_version("hostresolve"))
    except PackageNotFoundError:
        typer.echo("unknown")


def run() -> None:
    # Result lines must survive non-UTF-8 Windows consoles (IDN hostnames).
    if sys.platform == "win32":
        sys.stdout.reconfigure(encoding="utf-8")
        sys.stderr.reconfigure(encoding="utf-8")
    app()
