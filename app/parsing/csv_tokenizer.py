"""
app/parsing/csv_tokenizer.py

Quote-aware CSV tokenizer with incremental progress reporting.

Quoting rules
-------------
* A field may be wrapped in double quotes.
* Inside quotes, ``""`` is an escaped literal quote and does not close the field.
* Any other ``"`` toggles the inside-quotes state.
* ``,`` separates fields only outside quotes.
* The accumulated value is always emitted at end of line, even when empty.

Lines are split on ``\\n`` after ``\\r\\n`` normalization, so a quoted field
cannot span lines. Empty and whitespace-only lines produce no row.

The scan is a tight synchronous loop; callers that must stay responsive run
it through :mod:`app.workers.csv_worker`.
"""

from __future__ import annotations

from collections.abc import Callable

from app.domain.orders import Row

ProgressCallback = Callable[[float], None]

DEFAULT_PROGRESS_INTERVAL = 100

_QUOTE = '"'
_SEPARATOR = ","


def split_csv_line(line: str) -> Row:
    """
    Split one physical line into fields.
    """

    row: Row = []
    inside_quotes = False
    current: list[str] = []

    index = 0
    length = len(line)
    while index < length:
        char = line[index]
        if char == _QUOTE:
            if inside_quotes and index + 1 < length and line[index + 1] == _QUOTE:
                current.append(_QUOTE)
                index += 1
            else:
                inside_quotes = not inside_quotes
        elif char == _SEPARATOR and not inside_quotes:
            row.append("".join(current))
            current = []
        else:
            current.append(char)
        index += 1

    row.append("".join(current))
    return row


def tokenize_csv(
    text: str,
    on_progress: ProgressCallback | None = None,
    *,
    progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
) -> list[Row]:
    """
    Convert raw CSV text into rows of field strings.

    ``on_progress`` receives ``i / total_lines`` after line ``i`` (0-based)
    whenever ``i`` is a multiple of ``progress_interval`` or is the last
    line. Skipped blank lines still count as processed, so the final
    report always corresponds to the last line.
    """

    interval = max(1, progress_interval)
    lines = text.replace("\r\n", "\n").split("\n")
    total_lines = len(lines)
    rows: list[Row] = []

    for index, line in enumerate(lines):
        if line.strip():
            rows.append(split_csv_line(line))

        if on_progress is not None and (index % interval == 0 or index == total_lines - 1):
            on_progress(index / total_lines)

    return rows
