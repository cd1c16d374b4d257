"""Delta CLI application -- Typer-based front end for the comparison engine.

Loads two JSON documents into a record class named on the command line,
compares them and prints the delta.  Human-readable output goes to *stderr*
via Rich; with ``--json`` the serialized delta goes to *stdout* so that
pipelines can compose cleanly.
"""

from __future__ import annotations

import importlib
import json
import logging
from pathlib import Path
from typing import Any

import typer
from pydantic import PydanticUserError, TypeAdapter, ValidationError
from rich.console import Console
from rich.markup import escape

from delta_cli.display import display_delta
from delta_engine import __version__
from delta_engine.config import EngineConfig, load_settings
from delta_engine.diff import DeltaEngineError, compare, serialize_delta
from delta_engine.telemetry import configure_logging

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# App & global state
# ---------------------------------------------------------------------------

app = typer.Typer(
    name="delta-engine",
    help="Structured deltas between two snapshots of the same record type.",
    no_args_is_help=True,
)
console = Console(stderr=True)

# Mutable global options populated by the Typer callback.
_json_output: bool = False

EXIT_DIFFERENCES = 1
EXIT_ERROR = 2


@app.callback()
def _global_options(
    json_mode: bool = typer.Option(
        False,
        "--json/--no-json",
        help="Emit the delta as JSON on stdout instead of a Rich tree on stderr.",
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        help="Override DELTA_LOG_LEVEL (DEBUG, INFO, WARNING, ...).",
    ),
) -> None:
    """Global options applied to every command."""
    global _json_output  # noqa: PLW0603
    _json_output = json_mode

    overrides: dict[str, Any] = {}
    if log_level is not None:
        overrides["log_level"] = log_level
    try:
        settings = load_settings(**overrides)
    except ValidationError as exc:
        console.print(f"[red]Invalid settings: {escape(str(exc))}[/red]")
        raise typer.Exit(code=EXIT_ERROR) from exc
    configure_logging(settings)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _resolve_model(path: str) -> type:
    """Import ``package.module:ClassName`` (nested attributes allowed)."""
    module_name, sep, attr_path = path.partition(":")
    if not sep or not module_name or not attr_path:
        raise ValueError(f"expected 'module:Class', got {path!r}")

    target: Any = importlib.import_module(module_name)
    for attr in attr_path.split("."):
        target = getattr(target, attr)
    if not isinstance(target, type):
        raise ValueError(f"{path} is not a class")
    return target


def _load_document(path: Path, adapter: TypeAdapter[Any]) -> Any:
    raw = json.loads(path.read_text(encoding="utf-8"))
    return adapter.validate_python(raw)


def _fail(message: str, exc: Exception) -> typer.Exit:
    console.print(f"[red]{escape(message)}: {escape(str(exc))}[/red]")
    return typer.Exit(code=EXIT_ERROR)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def diff(
    old_path: Path = typer.Argument(..., help="JSON document of the old snapshot.", dir_okay=False),
    new_path: Path = typer.Argument(..., help="JSON document of the new snapshot.", dir_okay=False),
    model: str = typer.Option(
        ...,
        "--model",
        "-m",
        help="Record class both documents are loaded into, as 'module:Class'.",
    ),
    exclude: list[str] | None = typer.Option(
        None,
        "--exclude",
        "-x",
        help="Field name to skip at every nesting level (repeatable).",
    ),
    max_depth: int | None = typer.Option(
        None,
        "--max-depth",
        min=0,
        help="Nesting depth compared structurally (default: DELTA_MAX_DEPTH).",
    ),
    pretty: bool = typer.Option(
        False,
        "--pretty/--compact",
        help="Indent --json output (also enabled by DELTA_PRETTY_JSON).",
    ),
    exit_code: bool = typer.Option(
        False,
        "--exit-code",
        help="Exit with status 1 when the snapshots differ.",
    ),
) -> None:
    """Compare two JSON snapshots loaded into the same record class."""
    settings = load_settings()

    try:
        record_type = _resolve_model(model)
    except (ImportError, AttributeError, ValueError) as exc:
        raise _fail(f"Cannot load model {model}", exc) from exc

    try:
        adapter: TypeAdapter[Any] = TypeAdapter(record_type)
    except PydanticUserError as exc:
        raise _fail(f"Cannot load JSON snapshots into {model}", exc) from exc

    try:
        old_value = _load_document(old_path, adapter)
        new_value = _load_document(new_path, adapter)
    except (OSError, UnicodeDecodeError) as exc:
        raise _fail("Cannot read snapshot", exc) from exc
    except json.JSONDecodeError as exc:
        raise _fail("Invalid JSON", exc) from exc
    except ValidationError as exc:
        raise _fail(f"Snapshot does not match {record_type.__name__}", exc) from exc

    config = EngineConfig(
        excluded_fields=settings.excluded_fields | frozenset(exclude or ()),
        max_depth=settings.max_depth if max_depth is None else max_depth,
        float_tolerance=settings.float_tolerance,
    )

    try:
        delta = compare(old_value, new_value, config)
    except DeltaEngineError as exc:
        raise _fail("Comparison failed", exc) from exc

    logger.info("Compared %s snapshots: %d top-level change(s)", record_type.__name__, len(delta))

    if _json_output:
        typer.echo(serialize_delta(delta, pretty=pretty or settings.pretty_json))
    else:
        display_delta(console, delta, title=record_type.__name__)

    if exit_code and not delta.is_empty():
        raise typer.Exit(code=EXIT_DIFFERENCES)


@app.command()
def version() -> None:
    """Print the package version."""
    typer.echo(__version__)
