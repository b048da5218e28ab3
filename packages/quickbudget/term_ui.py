"""Terminal review of extracted candidates (prompt_toolkit-based).

Kept apart from the ledger logic so the prompts are easy to drive in tests
with a pipe input and ``DummyOutput``.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.validation import Validator

from .categories import category_labels
from .errors import ValidationError
from .models import KINDS, Candidate, Rejected
from .validation import validate_amount, validate_date

_ACTIONS = {"a": "accept", "r": "reject", "e": "edit"}


def _session(session: PromptSession | None) -> PromptSession:
    if session is None:
        return PromptSession()
    return PromptSession(
        input=getattr(session, "input", None),
        output=getattr(session, "output", None),
    )


def _validator(check, message: str) -> Validator:
    return Validator.from_callable(check, error_message=message, move_cursor_to_end=True)


def format_candidate(c: Candidate) -> str:
    sign = "+" if c.kind == "income" else "-"
    category = f" [{c.category}]" if c.category else ""
    return f"{c.date}  {sign}{c.amount:.2f}  {c.description}{category}"


def prompt_action(
    candidate: Candidate,
    *,
    position: int,
    total: int,
    session: PromptSession | None = None,
) -> str:
    """Ask whether to accept, reject or edit ``candidate``; an empty answer accepts."""

    sess = _session(session)
    answer = sess.prompt(
        f"[{position}/{total}] {format_candidate(candidate)}\n  (a)ccept / (r)eject / (e)dit: ",
        completer=WordCompleter(list(_ACTIONS), ignore_case=True),
        validator=_validator(
            lambda text: text.strip().lower()[:1] in ("", *_ACTIONS), "Type a, r or e."
        ),
        validate_while_typing=False,
    )
    return _ACTIONS.get(answer.strip().lower()[:1], "accept")


def edit_candidate(
    candidate: Candidate,
    *,
    categories: Sequence[str] | None = None,
    session: PromptSession | None = None,
) -> Candidate:
    """Prompt for each field of ``candidate`` with the current value pre-filled.

    Each prompt re-asks until its value is well formed; the ledger validates
    the final record again on admission.
    """

    labels = list(categories) if categories is not None else list(category_labels())

    description = _session(session).prompt(
        "Description: ",
        default=candidate.description,
        validator=_validator(lambda t: bool(t.strip()), "Description is required."),
        validate_while_typing=False,
    )
    amount_text = _session(session).prompt(
        "Amount: ",
        default=f"{candidate.amount:.2f}",
        validator=_validator(
            lambda t: isinstance(validate_amount(t), Decimal), "Enter a non-zero amount."
        ),
        validate_while_typing=False,
    )
    kind = _session(session).prompt(
        "Type (income/expense): ",
        default=candidate.kind,
        completer=WordCompleter(list(KINDS), ignore_case=True),
        validator=_validator(
            lambda t: t.strip().lower() in KINDS, "Type must be income or expense."
        ),
        validate_while_typing=False,
    )
    category = _session(session).prompt(
        "Category: ",
        default=candidate.category,
        completer=WordCompleter(labels, ignore_case=True, match_middle=True),
    )
    date_text = _session(session).prompt(
        "Date (YYYY-MM-DD): ",
        default=candidate.date,
        validator=_validator(lambda t: validate_date(t) is not None, "Use YYYY-MM-DD."),
        validate_while_typing=False,
    )

    amount = validate_amount(amount_text)
    if isinstance(amount, Rejected):
        raise ValidationError(amount.reason)
    candidate.description = description.strip()
    candidate.amount = amount
    candidate.kind = kind.strip().lower()  # type: ignore[assignment]
    candidate.category = category.strip()
    candidate.date = validate_date(date_text) or candidate.date
    candidate.selected = True
    return candidate


def review_candidates(
    candidates: Sequence[Candidate],
    *,
    categories: Sequence[str] | None = None,
    session: PromptSession | None = None,
) -> list[Candidate]:
    """Walk through ``candidates`` and record each decision on its ``selected`` flag.

    Returns the same candidate objects, edited in place where requested.
    """

    total = len(candidates)
    for pos, c in enumerate(candidates, start=1):
        action = prompt_action(c, position=pos, total=total, session=session)
        if action == "reject":
            c.selected = False
        elif action == "edit":
            edit_candidate(c, categories=categories, session=session)
        else:
            c.selected = True
    return list(candidates)


__all__ = ["format_candidate", "prompt_action", "edit_candidate", "review_candidates"]
