"""CLI for the ``expense_tracker`` package.

A Typer console interface over :class:`~expense_tracker.ledger.Ledger`. The
root callback loads a local ``.env`` (python-dotenv, without overriding the
environment), configures logging, and records the store location; each command
opens the ledger, runs one operation, and prints the result. Failures are
printed in red to stderr with exit status 1.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated, Any

import typer
from dotenv import load_dotenv
from typer.models import OptionInfo

from . import formatting, settings
from .categories import Category
from .errors import LedgerError
from .export import write_csv
from .ledger import Ledger
from .logging_setup import configure_logging
from .models import TimeFrame, TransactionType, TypeFilter
from .storage import open_store

_MONTH_NAMES = ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec")


# ---- Small module-level helpers used by CLI commands -------------------------


def parse_month(raw: str | None) -> int | None:
    """Map ``all``, ``jan``..``dec`` (or full names) or ``1``..``12`` to a 0-based index."""

    if raw is None:
        return None
    s = raw.strip().lower()
    if s in {"", "all"}:
        return None
    if s.isdigit():
        n = int(s)
        if 1 <= n <= 12:
            return n - 1
        raise typer.BadParameter(f"month must be 1..12, got {raw!r}")
    for i, name in enumerate(_MONTH_NAMES):
        if s.startswith(name):
            return i
    raise typer.BadParameter(f"unrecognized month: {raw!r}")


def _notify(message: str, *, ok: bool = True) -> None:
    if ok:
        typer.secho(message, fg=typer.colors.GREEN)
    else:
        typer.secho(message, fg=typer.colors.RED, err=True)


def _fail(message: str) -> typer.Exit:
    _notify(message, ok=False)
    return typer.Exit(1)


def _open_ledger(ctx: typer.Context) -> Ledger:
    opts: dict[str, Any] = ctx.obj or {}
    location = opts.get("store") or settings.store_location()
    try:
        year = opts.get("year") or settings.reference_year()
        ledger = Ledger(open_store(location), reference_year=year)
    except (LedgerError, ValueError) as e:
        raise _fail(f"Error: {e}") from e
    if ledger.load_warning:
        typer.secho(f"Warning: {ledger.load_warning}", fg=typer.colors.YELLOW, err=True)
    return ledger


def _apply_filters(
    ledger: Ledger,
    *,
    time_frame: TimeFrame,
    type_filter: TypeFilter,
    month: str | None,
) -> None:
    ledger.set_filters(time_frame=time_frame, type_filter=type_filter, month=parse_month(month))


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Track income and expenses: add and delete entries, and view filtered "
        "tables, summaries, category totals and trends."
    ),
)


# Module-level option objects to satisfy ruff B008 (no calls in parameter
# defaults). Shared by every query command.
TIME_FRAME_OPTION: OptionInfo = typer.Option(
    "--time-frame",
    "-t",
    help="Time frame: all, weekly, monthly or yearly.",
    case_sensitive=False,
)
TYPE_OPTION: OptionInfo = typer.Option(
    "--type",
    help="Transaction type: all, income or expense.",
    case_sensitive=False,
)
MONTH_OPTION: OptionInfo = typer.Option(
    "--month",
    "-m",
    help="Month for the monthly time frame: all, jan..dec or 1..12.",
)


@app.command("add")
def add_cmd(
    ctx: typer.Context,
    *,
    entry_type: TransactionType = typer.Option(
        ..., "--type", case_sensitive=False, help="income or expense."
    ),
    amount: str = typer.Option(..., help="Non-negative amount, e.g. 1250.50."),
    category: str | None = typer.Option(
        None, help="Category name or label; prompted for when omitted on a terminal."
    ),
    item: str = typer.Option("", help="Short label for the entry."),
    date: str | None = typer.Option(None, help="Date as YYYY-MM-DD (defaults to today)."),
    note: str | None = typer.Option(None, help="Optional note."),
) -> None:
    """Add an income or expense entry."""

    ledger = _open_ledger(ctx)

    if category is None and sys.stdin.isatty():
        from .term_ui import select_category

        category = select_category().value

    entry = {
        "type": entry_type,
        "category": category,
        "item": item,
        "amount": amount,
        "date": date or ledger.today().isoformat(),
        "note": note,
    }
    try:
        tx = ledger.add(entry)
    except LedgerError as e:
        raise _fail(f"Error: {e}") from e
    _notify(f"Transaction added successfully! ({tx.id})")


@app.command("delete")
def delete_cmd(
    ctx: typer.Context,
    transaction_id: str = typer.Argument(..., help="Id of the transaction to delete."),
    *,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
) -> None:
    """Delete a transaction by id."""

    ledger = _open_ledger(ctx)
    if not yes:
        typer.confirm("Are you sure you want to delete this transaction?", abort=True)
    try:
        ledger.delete(transaction_id)
    except LedgerError as e:
        raise _fail(f"Error: {e}") from e
    _notify("Transaction deleted successfully!")


@app.command("list")
def list_cmd(
    ctx: typer.Context,
    time_frame: Annotated[TimeFrame, TIME_FRAME_OPTION] = TimeFrame.ALL,
    type_filter: Annotated[TypeFilter, TYPE_OPTION] = TypeFilter.ALL,
    month: Annotated[str, MONTH_OPTION] = "all",
) -> None:
    """Show the filtered transactions, newest first."""

    ledger = _open_ledger(ctx)
    _apply_filters(ledger, time_frame=time_frame, type_filter=type_filter, month=month)
    typer.echo(formatting.render_transactions(ledger.table()))


@app.command("summary")
def summary_cmd(
    ctx: typer.Context,
    time_frame: Annotated[TimeFrame, TIME_FRAME_OPTION] = TimeFrame.ALL,
    type_filter: Annotated[TypeFilter, TYPE_OPTION] = TypeFilter.ALL,
    month: Annotated[str, MONTH_OPTION] = "all",
) -> None:
    """Show total income, total expense and balance."""

    ledger = _open_ledger(ctx)
    _apply_filters(ledger, time_frame=time_frame, type_filter=type_filter, month=month)
    typer.echo(formatting.render_summary(ledger.summary()))


@app.command("categories")
def categories_cmd(
    ctx: typer.Context,
    time_frame: Annotated[TimeFrame, TIME_FRAME_OPTION] = TimeFrame.ALL,
    type_filter: Annotated[TypeFilter, TYPE_OPTION] = TypeFilter.ALL,
    month: Annotated[str, MONTH_OPTION] = "all",
) -> None:
    """Show expense totals per category."""

    ledger = _open_ledger(ctx)
    _apply_filters(ledger, time_frame=time_frame, type_filter=type_filter, month=month)
    typer.echo(formatting.render_category_totals(ledger.category_totals()))


@app.command("trend")
def trend_cmd(
    ctx: typer.Context,
    time_frame: Annotated[TimeFrame, TIME_FRAME_OPTION] = TimeFrame.YEARLY,
    type_filter: Annotated[TypeFilter, TYPE_OPTION] = TypeFilter.ALL,
    month: Annotated[str, MONTH_OPTION] = "all",
) -> None:
    """Show the income/expense trend for the time frame."""

    ledger = _open_ledger(ctx)
    _apply_filters(ledger, time_frame=time_frame, type_filter=type_filter, month=month)
    typer.echo(formatting.render_trend(ledger.trend_series()))


@app.command("export")
def export_cmd(
    ctx: typer.Context,
    time_frame: Annotated[TimeFrame, TIME_FRAME_OPTION] = TimeFrame.ALL,
    type_filter: Annotated[TypeFilter, TYPE_OPTION] = TypeFilter.ALL,
    month: Annotated[str, MONTH_OPTION] = "all",
    *,
    output_dir: Path = typer.Option(
        Path("."), "--output-dir", "-o", file_okay=False, help="Directory for the CSV file."
    ),
) -> None:
    """Export the filtered transactions to CSV."""

    ledger = _open_ledger(ctx)
    _apply_filters(ledger, time_frame=time_frame, type_filter=type_filter, month=month)
    try:
        path = write_csv(ledger.filtered(), directory=output_dir, today=ledger.today())
    except LedgerError as e:
        raise _fail(str(e)) from e
    _notify(f"Data exported successfully! ({path})")


@app.command("category-list")
def category_list_cmd() -> None:
    """Print the available categories."""

    for c in Category:
        typer.echo(c.label)


@app.callback()
def _root(
    ctx: typer.Context,
    *,
    store: str | None = typer.Option(
        None,
        help="Store URL or directory (falls back to EXPENSE_TRACKER_STORE).",
    ),
    year: int | None = typer.Option(
        None,
        min=1,
        max=9999,
        help="Reference year for the yearly time frame (defaults to the current year).",
    ),
    log_level: str | None = typer.Option(
        None, help="Log level (falls back to EXPENSE_TRACKER_LOG_LEVEL, then INFO)."
    ),
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(log_level)
    ctx.obj = {"store": store, "year": year}


def main() -> None:  # pragma: no cover - console script shim
    app()


if __name__ == "__main__":  # pragma: no cover
    # Running as a module: `python -m expense_tracker.cli`
    app()


__all__ = ["app", "main", "parse_month"]

