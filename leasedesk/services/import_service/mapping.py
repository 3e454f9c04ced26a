"""Column header resolution for vehicle offer imports."""

import logging
from dataclasses import dataclass, field
from typing import Any, Sequence

from .constants import CANONICAL_FIELDS, HEADER_ALIASES
from .normalizers import normalize_header

logger = logging.getLogger(__name__)

# Aliases are static, so normalize them once
_NORMALIZED_ALIASES: dict[str, frozenset[str]] = {
    canonical: frozenset(normalize_header(alias) for alias in aliases)
    for canonical, aliases in HEADER_ALIASES.items()
}


@dataclass
class ColumnMap:
    """Result of matching spreadsheet headers to canonical fields.

    Attributes:
        field_to_column_index: Canonical field -> 0-based column index.
        missing_required_fields: Canonical fields with no matching column,
            in canonical declaration order.
    """

    field_to_column_index: dict[str, int] = field(default_factory=dict)
    missing_required_fields: list[str] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return not self.missing_required_fields


def resolve_column_map(headers: Sequence[Any]) -> ColumnMap:
    """Map raw header cells to canonical fields via the alias table.

    For each canonical field the first column whose normalized header equals
    one of the field's aliases wins; later duplicate columns are ignored.
    Resolution never fails: unmatched fields are listed in
    ``missing_required_fields`` and the caller decides what to do.

    Args:
        headers: Raw header row cells.

    Returns:
        ColumnMap for the header row.
    """
    normalized_headers = [normalize_header(header) for header in headers]
    column_map = ColumnMap()

    for canonical in CANONICAL_FIELDS:
        aliases = _NORMALIZED_ALIASES[canonical]
        for index, header in enumerate(normalized_headers):
            if header and header in aliases:
                column_map.field_to_column_index[canonical] = index
                break
        else:
            column_map.missing_required_fields.append(canonical)

    if column_map.missing_required_fields:
        logger.debug(
            "Unmatched canonical fields: %s",
            ", ".join(column_map.missing_required_fields),
        )

    return column_map
