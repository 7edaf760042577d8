from __future__ import annotations

"""CSV tokenizer for the published Google Sheets export.

The export is small and its quoting is simple (cells containing commas are
wrapped in double quotes), so lines are split with a single quote-toggle
scan. Malformed quoting never raises: an unbalanced quote just leaves the
rest of the line in one cell.
"""

__all__ = [
    "parse_csv_line",
    "split_lines",
]


def parse_csv_line(line: str) -> list[str]:
    """Split one CSV line into trimmed, quote-stripped cells."""
    cells: list[str] = []
    current: list[str] = []
    in_quotes = False
    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            cells.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    cells.append("".join(current).strip())
    return cells


def split_lines(text: str) -> list[str]:
    """Split a CSV document into lines, dropping blank ones.

    Sheet row positions used by the parser count non-blank lines only.
    """
    return [line for line in text.split("\n") if line.strip()]
