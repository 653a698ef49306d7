"""Plain-text table rendering for command output."""

from typing import Sequence


def fmt_table(rows: Sequence[Sequence[object]]) -> str:
    """Render rows as left-aligned columns; the first row is the header."""
    if not rows:
        return ""
    widths = [max(len(str(c)) for c in col) for col in zip(*rows)]

    def line(cells):
        return "  ".join(str(c).ljust(w) for c, w in zip(cells, widths)).rstrip()

    out = [line(rows[0]), "  ".join("-" * w for w in widths)]
    out += [line(r) for r in rows[1:]]
    return "\n".join(out)
