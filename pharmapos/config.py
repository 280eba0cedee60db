"""Configuration constants for the pharmacy point-of-sale core."""

import logging
from pathlib import Path

# Path to the Excel workbook containing the medicine catalog.
EXCEL_PATH: Path = Path("data/medicines.xlsx")

# Sheet name inside the Excel workbook.
EXCEL_SHEET_NAME: str = "Medicines"

# JSON file holding saved (temporary) bills.
BILLS_PATH: Path = Path("data/temporary_bills.json")

# Maximum number of medicines returned for a search query.
SEARCH_RESULT_LIMIT: int = 10

# Share of query characters that must match in order for a partial fuzzy hit.
PARTIAL_MATCH_RATIO: float = 0.6

# Used when a medicine carries no low stock threshold of its own.
DEFAULT_LOW_STOCK_THRESHOLD: int = 50

# Medicines expiring within this many months are flagged.
EXPIRY_WARNING_MONTHS: int = 3

# Flat tax rate applied to the discounted subtotal of a bill.
TAX_RATE_PERCENT: float = 0.0

# Currency label printed next to amounts.
CURRENCY: str = "PKR"

LOG_LEVEL: int = logging.INFO
LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
