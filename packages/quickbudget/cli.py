# ruff: noqa: I001
"""CLI for the ``quickbudget`` package.

This module exposes callable command handlers (``cmd_*`` functions returning
an exit code) and a Typer-based console interface on top of them. Settings
(``DATABASE_URL``, ``QUICKBUDGET_*`` limits and log level) are loaded from a
local ``.env`` using ``python-dotenv`` before any command runs. Business logic
lives in :mod:`quickbudget.api` and the modules it composes.
"""

from __future__ import annotations

import sys
from dataclasses import replace
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from typer.models import ArgumentInfo

from .api import Ledger
from .config import ImportLimits
from .errors import QuickBudgetError
from .logging_setup import configure_logging
from .models import Candidate, SkippedRow, Totals, Transaction
from .persistence import SqlLedgerStore


# ---- Small module-level helpers used by CLI commands -------------------------


def _ledger(database_url: str | None) -> Ledger:
    return Ledger(SqlLedgerStore(database_url), limits=ImportLimits.from_env())


def _format_transaction(t: Transaction) -> str:
    sign = "+" if t.kind == "income" else "-"
    return f"{t.id}\t{t.date}\t{sign}{t.amount:.2f}\t{t.category or '-'}\t{t.description}"


def _print_totals(totals: Totals) -> None:
    print(f"Income:  {totals.income:.2f}")
    print(f"Expense: {totals.expense:.2f}")
    print(f"Net:     {totals.net:.2f}")
    for label, amount in sorted(totals.by_category.items()):
        print(f"  {label}: {amount:.2f}")


def _print_skipped(skipped: tuple[SkippedRow, ...], *, noun: str) -> None:
    for s in skipped:
        print(f"  skipped {noun} {s.position}: {s.reason}", file=sys.stderr)


# ---- Command handlers ----------------------------------------------------------


def cmd_add(
    description: str,
    amount: str,
    *,
    kind: str,
    category: str = "",
    date: str | None = None,
    database_url: str | None = None,
) -> int:
    try:
        txn = _ledger(database_url).add_manual(description, amount, kind, category, date)
    except QuickBudgetError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(f"Added {_format_transaction(txn)}")
    return 0


def cmd_list(
    *, kind: str | None = None, search: str | None = None, database_url: str | None = None
) -> int:
    if kind is not None and kind not in ("income", "expense"):
        print(f"Error: --kind must be income or expense, got {kind!r}", file=sys.stderr)
        return 1
    ledger = _ledger(database_url)
    rows = ledger.transactions(kind=kind, search=search)  # type: ignore[arg-type]
    if not rows:
        print("No transactions.")
    for t in rows:
        print(_format_transaction(t))
    _print_totals(ledger.totals(rows))
    return 0


def cmd_delete(txn_id: str, *, database_url: str | None = None) -> int:
    if not _ledger(database_url).delete(txn_id):
        print(f"Error: no transaction with id {txn_id!r}", file=sys.stderr)
        return 1
    print(f"Deleted {txn_id}")
    return 0


def cmd_export_csv(*, output: Path | None = None, database_url: str | None = None) -> int:
    text = _ledger(database_url).export_csv()
    if output is None:
        sys.stdout.write(text)
        return 0
    try:
        output.write_text(text, encoding="utf-8")
    except OSError as e:
        print(f"Error: cannot write {output}: {e}", file=sys.stderr)
        return 1
    print(f"Exported to {output}")
    return 0


def cmd_import_csv(path: Path, *, replace: bool = False, database_url: str | None = None) -> int:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        print(f"Error: File not found: {path}", file=sys.stderr)
        return 1
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: cannot read '{path}': {e}", file=sys.stderr)
        return 1

    try:
        outcome = _ledger(database_url).import_csv(text, mode="replace" if replace else "append")
    except QuickBudgetError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not outcome.admitted:
        print("No valid transactions found in CSV file.")
        _print_skipped(outcome.skipped, noun="row")
        return 0
    verb = "Replaced ledger with" if outcome.mode == "replace" else "Imported"
    print(f"{verb} {len(outcome.admitted)} transaction(s) ({outcome.skipped_count} skipped).")
    _print_skipped(outcome.skipped, noun="row")
    return 0


def cmd_extract_pdf(path: Path, *, output: Path, timeout: float | None = None) -> int:
    from .pipeline import extract_candidates_from_pdf
    from .review import ReviewFile, save_review_file

    limits = ImportLimits.from_env()
    if timeout is not None and timeout > 0:
        limits = replace(limits, timeout_s=timeout)

    try:
        result = extract_candidates_from_pdf(path, limits=limits)
    except QuickBudgetError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if result.pages_truncated:
        print(
            f"Warning: only the first {result.pages_processed} of "
            f"{result.pages_total} pages were processed.",
            file=sys.stderr,
        )
    if result.is_empty:
        print("No transactions found in the document.")
        return 0

    review = ReviewFile.from_extraction(result, source=path.name)
    try:
        save_review_file(output, review)
    except OSError as e:
        print(f"Error: cannot write {output}: {e}", file=sys.stderr)
        return 1
    print(f"Found {len(result.candidates)} transaction(s); review file written to {output}")
    return 0


def cmd_review(
    review_path: Path,
    *,
    yes: bool = False,
    database_url: str | None = None,
) -> int:
    from .review import load_review_file
    from .term_ui import review_candidates

    try:
        review = load_review_file(review_path)
    except QuickBudgetError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    candidates: list[Candidate] = review.to_candidates()
    if not candidates:
        print("No candidates to review.")
        return 0
    if review.statement_period is not None:
        period = review.statement_period.to_period()
        if period is not None:
            print(f"Statement period: {period.start} to {period.end}")

    if not yes:
        review_candidates(candidates)

    outcome = _ledger(database_url).admit_candidates(candidates)
    print(
        f"Added {len(outcome.admitted)} transaction(s) ({outcome.skipped_count} skipped)."
    )
    _print_skipped(outcome.skipped, noun="candidate")
    return 0


def cmd_worksheet_set(key: str, value: str, *, database_url: str | None = None) -> int:
    try:
        stored = SqlLedgerStore(database_url).set_worksheet_value(key, value)
    except QuickBudgetError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(f"{key.strip()} = {stored:.2f}")
    return 0


def cmd_worksheet_show(*, database_url: str | None = None) -> int:
    values = SqlLedgerStore(database_url).load_worksheet()
    if not values:
        print("Worksheet is empty.")
    for key, value in values.items():
        print(f"{key}\t{value:.2f}")
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Track income and expenses: manual entry, CSV import/export and "
        "bank statement (PDF) extraction with review. Loads settings from a "
        "local .env before running."
    ),
)

# Module-level argument object to satisfy ruff B008 (no calls in parameter
# defaults).
PATH_ARGUMENT: ArgumentInfo = typer.Argument(
    ..., dir_okay=False, file_okay=True, exists=False, readable=True
)


def _exit(code: int) -> None:
    if code:
        raise typer.Exit(code)


def _db(ctx: typer.Context) -> str | None:
    return (ctx.obj or {}).get("database_url")


@app.command("add")
def add_cmd(
    ctx: typer.Context,
    description: str,
    amount: str,
    *,
    kind: str = typer.Option("expense", help="income or expense."),
    category: str = typer.Option("", help="Optional category label."),
    date: str | None = typer.Option(None, help="YYYY-MM-DD; defaults to today."),
) -> None:
    """Add one transaction."""

    _exit(
        cmd_add(
            description, amount, kind=kind, category=category, date=date, database_url=_db(ctx)
        )
    )


@app.command("list")
def list_cmd(
    ctx: typer.Context,
    *,
    kind: str | None = typer.Option(None, help="Only income or only expense."),
    search: str | None = typer.Option(None, help="Match description or category text."),
) -> None:
    """List transactions with totals."""

    _exit(cmd_list(kind=kind, search=search, database_url=_db(ctx)))


@app.command("delete")
def delete_cmd(ctx: typer.Context, txn_id: str) -> None:
    """Delete a transaction by id."""

    _exit(cmd_delete(txn_id, database_url=_db(ctx)))


@app.command("export-csv")
def export_csv_cmd(
    ctx: typer.Context,
    *,
    output: Path | None = typer.Option(None, help="Write to this file instead of stdout."),
) -> None:
    """Export the ledger as CSV."""

    _exit(cmd_export_csv(output=output, database_url=_db(ctx)))


@app.command("import-csv")
def import_csv_cmd(
    ctx: typer.Context,
    path: Annotated[Path, PATH_ARGUMENT],
    *,
    replace: bool = typer.Option(
        False, "--replace", help="Replace the ledger instead of appending to it."
    ),
) -> None:
    """Import transactions from a CSV file."""

    _exit(cmd_import_csv(path, replace=replace, database_url=_db(ctx)))


@app.command("extract-pdf")
def extract_pdf_cmd(
    path: Annotated[Path, PATH_ARGUMENT],
    *,
    output: Path = typer.Option(..., help="Review file (JSON) to write."),
    timeout: float | None = typer.Option(
        None, help="Processing time budget in seconds (QUICKBUDGET_PDF_TIMEOUT)."
    ),
) -> None:
    """Extract transactions from a bank statement PDF into a review file."""

    _exit(cmd_extract_pdf(path, output=output, timeout=timeout))


@app.command("review")
def review_cmd(
    ctx: typer.Context,
    review_path: Annotated[Path, PATH_ARGUMENT],
    *,
    yes: bool = typer.Option(
        False, "--yes", help="Admit every selected candidate without prompting."
    ),
) -> None:
    """Review extracted candidates and add the accepted ones."""

    _exit(cmd_review(review_path, yes=yes, database_url=_db(ctx)))


@app.command("worksheet-set")
def worksheet_set_cmd(ctx: typer.Context, key: str, value: str) -> None:
    """Store a numeric worksheet value."""

    _exit(cmd_worksheet_set(key, value, database_url=_db(ctx)))


@app.command("worksheet-show")
def worksheet_show_cmd(ctx: typer.Context) -> None:
    """Show stored worksheet values."""

    _exit(cmd_worksheet_show(database_url=_db(ctx)))


@app.callback(invoke_without_command=True)
def _root(
    ctx: typer.Context,
    *,
    database_url: str | None = typer.Option(
        None, help="Override DATABASE_URL (falls back to env var)."
    ),
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures logging once.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    # Central logging setup so child loggers inherit configuration
    configure_logging()

    ctx.obj = {"database_url": database_url}
    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


if __name__ == "__main__":  # pragma: no cover
    # Running as a module: `python -m quickbudget.cli`
    app()
