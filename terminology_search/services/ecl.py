"""
ECL expression builder.

Keeps the ordered list of filter rows behind the ECL search and renders it
into the short form sent to the terminology server and a long form used
for diagnostics. The expression is always derived from the rows, never
stored on its own.
"""

from collections.abc import Sequence

from terminology_search.config.defaults import (
    DEFAULT_ECL_OPERATOR,
    ECL_OPERATORS,
    get_ecl_operator,
)
from terminology_search.config.logging import get_logger
from terminology_search.errors import InvalidFilterRowError, UnknownEclOperatorError
from terminology_search.models.ecl import EclExpression, FilterRow, FilterRowInput

logger = get_logger(__name__)

ROW_SEPARATOR = ", "


def make_row(operator: str | None = None, code: str = "", label: str = "") -> FilterRow:
    """
    Build a filter row from an operator long name.

    Raises:
        UnknownEclOperatorError: If the operator is not in the catalogue
    """
    long_name = operator or DEFAULT_ECL_OPERATOR
    op = get_ecl_operator(long_name)
    if op is None:
        raise UnknownEclOperatorError(long_name)
    return FilterRow(
        operator_short=op.short,
        operator_long=op.long_name,
        code=(code or "").strip(),
        label=(label or "").strip(),
    )


def default_row() -> FilterRow:
    return make_row()


def _render_row(row: FilterRow, operator: str) -> str | None:
    if row.is_any:
        return operator
    if not row.code:
        return None
    # The self operator has no token
    prefix = f"{operator} " if operator else ""
    if row.label:
        return f"{prefix}{row.code}|{row.label}|"
    return f"{prefix}{row.code}"


def render_rows(rows: Sequence[FilterRow]) -> EclExpression:
    """
    Render filter rows into ECL.

    ANY rows emit the bare operator; rows without a code are skipped; a
    label is appended between pipes when present.
    """
    short_parts: list[str] = []
    long_parts: list[str] = []
    for row in rows:
        short = _render_row(row, row.operator_short)
        if short is None:
            continue
        short_parts.append(short)
        long_parts.append(_render_row(row, row.operator_long))
    return EclExpression(
        short_form=ROW_SEPARATOR.join(short_parts),
        long_form=ROW_SEPARATOR.join(long_parts),
    )


class EclExpressionBuilder:
    """Ordered, never-empty list of ECL filter rows."""

    def __init__(self, rows: Sequence[FilterRow] | None = None):
        self._rows: list[FilterRow] = list(rows) if rows else [default_row()]

    @property
    def rows(self) -> tuple[FilterRow, ...]:
        return tuple(self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    def append_row(
        self, operator: str | None = None, code: str = "", label: str = ""
    ) -> FilterRow:
        """Add a row after the last one. Rows after the first are removable."""
        row = make_row(operator, code, label)
        self._rows.append(row)
        logger.debug("Appended ECL filter row", index=len(self._rows) - 1, operator=row.operator_long)
        return row

    def update_row(
        self,
        index: int,
        operator: str | None = None,
        code: str | None = None,
        label: str | None = None,
    ) -> FilterRow:
        """Edit the fields of a row; fields left as None keep their value."""
        current = self._rows[index]
        row = make_row(
            operator or current.operator_long,
            current.code if code is None else code,
            current.label if label is None else label,
        )
        self._rows[index] = row
        return row

    def remove_row(self, index: int) -> None:
        """
        Remove a row.

        The first row can only be "removed" when it is the only one, in which
        case it is reset to a default row so the list is never empty.

        Raises:
            IndexError: If the index is out of range
            InvalidFilterRowError: If removing the first row while others exist
        """
        if index < 0:
            index += len(self._rows)
        if not 0 <= index < len(self._rows):
            raise IndexError(f"Filter row index out of range: {index}")
        if index == 0 and len(self._rows) > 1:
            raise InvalidFilterRowError(0, "the first filter row cannot be removed")

        del self._rows[index]
        if not self._rows:
            self._rows.append(default_row())
        logger.debug("Removed ECL filter row", index=index, remaining=len(self._rows))

    def replace_all(self, rows: Sequence[FilterRow | FilterRowInput]) -> None:
        """
        Replace the filter list: row 0 becomes rows[0], rows[1:] are appended.

        An empty sequence resets the builder to a single default row.
        """
        new_rows = [self._coerce(row) for row in rows] or [default_row()]
        self._rows[1:] = []
        self._rows[0] = new_rows[0]
        self._rows.extend(new_rows[1:])
        logger.debug("Replaced ECL filter rows", count=len(self._rows))

    def children_of(self, code: str, label: str = "") -> None:
        """Filter to the direct children of a concept."""
        self.replace_all([make_row("childOf", code, label)])

    def parents_of(self, code: str, label: str = "") -> None:
        """Filter to the direct parents of a concept."""
        self.replace_all([make_row("parentOf", code, label)])

    def render(self) -> EclExpression:
        return render_rows(self._rows)

    @staticmethod
    def _coerce(row: FilterRow | FilterRowInput) -> FilterRow:
        if isinstance(row, FilterRow):
            return row
        return make_row(row.operator, row.code, row.label)


def operator_catalogue() -> list[dict[str, str]]:
    """The supported operators, in display order."""
    return [
        {"long_name": op.long_name, "short": op.short, "description": op.description}
        for op in ECL_OPERATORS
    ]
