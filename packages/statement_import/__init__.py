"""Public interface for the ``statement_import`` package.

This module exposes the package's parsing primitives, the import workflow and
the ledger operations as the stable import surface. There is no runtime logic
here, only symbol re-exports.
"""

from .amounts import NumberLocale, format_amount, parse_amount
from .api import (
    Summary,
    add_manual_transaction,
    auto_categorize,
    filter_transactions,
    sort_by_date,
    summarize,
    toggle_ignored,
    update_transaction,
)
from .categories import CategoryBook, category_book_from_mapping, load_category_book
from .categorization import CategoryMatcher, match_category
from .config import ImportSettings
from .dates import DateOrder, format_date, parse_date
from .errors import BatchImportError, EmptyGridError
from .ingest.grid import Cell, CellKind, Grid, to_grid
from .ingest.readers import read_csv_text, read_grid
from .ingest.structure import TableStructure, detect_structure
from .models import (
    Category,
    CategoryType,
    ColumnMapping,
    Ledger,
    StagedTransaction,
    Transaction,
)
from .normalizers import normalize_text
from .workflows.import_flow import ImportResult, ImportSession, SkipCounts, import_grid

__all__ = [
    # Parsing primitives
    "normalize_text",
    "NumberLocale",
    "parse_amount",
    "format_amount",
    "DateOrder",
    "parse_date",
    "format_date",
    # Grid / structure
    "Cell",
    "CellKind",
    "Grid",
    "to_grid",
    "read_grid",
    "read_csv_text",
    "TableStructure",
    "detect_structure",
    # Categories
    "CategoryBook",
    "CategoryMatcher",
    "match_category",
    "category_book_from_mapping",
    "load_category_book",
    # Import workflow
    "ImportSettings",
    "ImportSession",
    "ImportResult",
    "SkipCounts",
    "import_grid",
    "BatchImportError",
    "EmptyGridError",
    # Models
    "Category",
    "CategoryType",
    "ColumnMapping",
    "Ledger",
    "StagedTransaction",
    "Transaction",
    # Ledger operations
    "Summary",
    "add_manual_transaction",
    "auto_categorize",
    "filter_transactions",
    "sort_by_date",
    "summarize",
    "toggle_ignored",
    "update_transaction",
]
