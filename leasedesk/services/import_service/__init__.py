"""Import service package: workbook decoding, normalization and the import ledger."""

from .constants import (
    CANONICAL_FIELDS,
    HEADER_ALIASES,
    MAX_RESPONSE_ERRORS,
    MAX_ROWS,
)
from .converters import CanonicalOfferRow, LenientValue, ValueKind, normalize_row
from .ledger import (
    BeanieImportLedger,
    ImportLedger,
    clear_imported_data,
    get_batch,
    get_batch_errors,
    list_batches,
)
from .mapping import ColumnMap, resolve_column_map
from .normalizers import (
    build_title,
    normalize_header,
    normalize_text,
    normalize_url,
    parse_boolean,
    parse_integer,
    parse_price,
)
from .parsers import SheetData, SpreadsheetError, parse_xlsx
from .processor import import_workbook
from .validation import RowValidationError, validate_row

__all__ = [
    # Constants
    "CANONICAL_FIELDS",
    "HEADER_ALIASES",
    "MAX_RESPONSE_ERRORS",
    "MAX_ROWS",
    # Normalizers
    "build_title",
    "normalize_header",
    "normalize_text",
    "normalize_url",
    "parse_boolean",
    "parse_integer",
    "parse_price",
    # Parsers
    "SheetData",
    "SpreadsheetError",
    "parse_xlsx",
    # Mapping
    "ColumnMap",
    "resolve_column_map",
    # Converters
    "CanonicalOfferRow",
    "LenientValue",
    "ValueKind",
    "normalize_row",
    # Validation
    "RowValidationError",
    "validate_row",
    # Ledger
    "BeanieImportLedger",
    "ImportLedger",
    "clear_imported_data",
    "get_batch",
    "get_batch_errors",
    "list_batches",
    # Processor
    "import_workbook",
]
