"""Builders for statement fixtures: positioned fragments and page lists."""

from __future__ import annotations

from collections.abc import Sequence

from quickbudget.models import Fragment

LINE_HEIGHT = 14.0
PAGE_TOP = 760.0

PERIOD_LINE = "Statement period March 1, 2024 through March 31, 2024"


def fragments_for_lines(lines: Sequence[str], *, top: float = PAGE_TOP) -> list[Fragment]:
    """Lay ``lines`` out top to bottom, one fragment per word.

    Words are emitted in reverse order so tests exercise the x-sort rather than
    relying on input order.
    """

    frags: list[Fragment] = []
    for i, line in enumerate(lines):
        y = top - i * LINE_HEIGHT
        x = 36.0
        placed: list[Fragment] = []
        for word in line.split():
            placed.append(Fragment(x=x, y=y, text=word))
            x += 6.0 * (len(word) + 1)
        frags.extend(reversed(placed))
    return frags


def pages_for(*pages: Sequence[str]) -> list[list[Fragment]]:
    return [fragments_for_lines(lines) for lines in pages]
