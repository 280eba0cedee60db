"""Excel repository for loading and updating the medicine catalog."""

from __future__ import annotations

import logging
import re
from datetime import date, datetime
from pathlib import Path
from typing import Dict, List, Optional

from openpyxl import Workbook, load_workbook
from openpyxl.worksheet.worksheet import Worksheet

from pharmapos import config
from pharmapos.ledger import StockLedger
from pharmapos.models.medicine import DISCOUNT_FIELDS, PRICE_FIELDS, Medicine, add_months

logger = logging.getLogger(__name__)

TEMPLATE_HEADERS = [
    "Medicine Name",
    "Generic Name",
    "Company Name",
    "Medicine Type",
    "Units Per Box",
    "Total Stock Units",
    "Customer Selling Price",
    "Doctor Selling Price",
    "Medical Professional Selling Price",
    "Expiry Date",
    "Low Stock Threshold",
]

# Checked in order against the normalised header; the first rule that
# matches decides the field.
HEADER_RULES = [
    ("id", ("id",), True),
    ("generic_name", ("generic",), False),
    ("company_name", ("company", "manufacturer"), False),
    ("units_per_box", ("unitsperbox", "perbox"), False),
    ("low_stock_threshold", ("threshold", "alert"), False),
    ("quantity", ("totalstock", "stock", "quantity"), False),
    ("customer_discount_percentage", ("customerdiscount",), False),
    ("doctor_discount_percentage", ("doctordiscount",), False),
    ("medical_professional_discount_percentage", ("professionaldiscount",), False),
    ("doctor_selling_price", ("doctorprice", "doctorsellingprice"), False),
    ("medical_professional_selling_price", ("medicalprofessional", "professionalprice"), False),
    ("purchase_price", ("purchase",), False),
    ("customer_selling_price", ("customerprice", "customersellingprice", "price"), False),
    ("expiry_date", ("expiry", "date"), False),
    ("type", ("type",), False),
    ("name", ("medicinename", "name"), False),
]

INT_FIELDS = {"units_per_box", "low_stock_threshold", "quantity"}
FLOAT_FIELDS = {
    "customer_selling_price",
    "customer_discount_percentage",
    "doctor_selling_price",
    "doctor_discount_percentage",
    "medical_professional_selling_price",
    "medical_professional_discount_percentage",
    "purchase_price",
}


def normalize_header(header) -> str:
    return re.sub(r"[^a-z0-9]", "", str(header).lower())


def map_header(header) -> Optional[str]:
    """Return the medicine field a column header maps to, or None to skip it."""
    normalized = normalize_header(header)
    if not normalized:
        return None
    for field_name, keywords, exact in HEADER_RULES:
        if exact:
            if normalized in keywords:
                return field_name
        elif any(keyword in normalized for keyword in keywords):
            return field_name
    return None


class ExcelRepository:
    """Handles reading and writing catalog data in Excel."""

    def __init__(self, path: Path | str = None, sheet_name: Optional[str] = None) -> None:
        self.path: Path = Path(path) if path else config.EXCEL_PATH
        self.sheet_name = sheet_name or config.EXCEL_SHEET_NAME
        if not self.path.exists():
            raise FileNotFoundError(f"Excel file not found: {self.path}")
        self._workbook = load_workbook(self.path)
        if self.sheet_name not in self._workbook.sheetnames:
            raise ValueError(f"Sheet '{self.sheet_name}' not found in Excel file.")
        self._sheet: Worksheet = self._workbook[self.sheet_name]
        self._columns = self._detect_columns()

    def _detect_columns(self) -> Dict[str, int]:
        """Map medicine fields to column indexes; raises on missing or duplicate columns."""
        columns: Dict[str, int] = {}
        for idx, cell in enumerate(self._sheet[1], start=1):
            if cell.value is None:
                continue
            field_name = map_header(cell.value)
            if field_name is None:
                continue
            if field_name in columns:
                raise ValueError(
                    f"Column '{cell.value}' maps to '{field_name}', which is already mapped."
                )
            columns[field_name] = idx

        if "name" not in columns:
            raise ValueError("Missing required columns in Excel: Medicine Name")
        return columns

    def list_medicines(self, today: Optional[date] = None) -> List[Medicine]:
        """Return all medicines, filling in defaults for empty cells."""
        today = today or date.today()
        medicines: List[Medicine] = []
        for row_idx, row in enumerate(self._sheet.iter_rows(min_row=2), start=2):
            values = {name: row[idx - 1].value for name, idx in self._columns.items() if idx <= len(row)}
            if all(value in (None, "") for value in values.values()):
                continue
            medicines.append(self._build_medicine(row_idx, values, today))
        logger.info("Loaded %d medicines from %s", len(medicines), self.path)
        return medicines

    def _build_medicine(self, row_idx: int, values: Dict, today: date) -> Medicine:
        data = {}
        for field_name, value in values.items():
            if field_name in INT_FIELDS:
                data[field_name] = self._to_int(value, default=0)
            elif field_name in FLOAT_FIELDS:
                data[field_name] = self._to_float(value, default=0.0)
            elif field_name == "expiry_date":
                data[field_name] = self._to_date(value)
            elif value not in (None, ""):
                data[field_name] = str(value).strip()

        data.setdefault("id", str(row_idx - 1))
        data.setdefault("name", f"Imported Medicine {row_idx - 1}")
        data.setdefault("type", "Tablet")
        if data.get("units_per_box", 0) <= 0:
            data["units_per_box"] = 1
        if data.get("quantity", 0) < 0:
            logger.warning("Row %d has negative stock; using 0", row_idx)
            data["quantity"] = 0
        if not data.get("low_stock_threshold"):
            data["low_stock_threshold"] = config.DEFAULT_LOW_STOCK_THRESHOLD
        if data.get("expiry_date") is None:
            data["expiry_date"] = add_months(today, 12)
        for field_name in PRICE_FIELDS:
            if data.get(field_name, 0.0) < 0:
                logger.warning("Row %d has negative %s; using 0", row_idx, field_name)
                data[field_name] = 0.0
        for field_name in DISCOUNT_FIELDS:
            value = data.get(field_name, 0.0)
            if not 0 <= value <= 100:
                clamped = min(max(value, 0.0), 100.0)
                logger.warning("Row %d has %s of %s; using %s", row_idx, field_name, value, clamped)
                data[field_name] = clamped
        return Medicine(**data)

    def _row_id(self, row_idx: int, row) -> str:
        """Id a row gets on load: the id column when mapped, else its position."""
        id_col = self._columns.get("id")
        if id_col is not None and id_col <= len(row) and row[id_col - 1].value not in (None, ""):
            return str(row[id_col - 1].value).strip()
        return str(row_idx - 1)

    def load_ledger(self) -> StockLedger:
        return StockLedger(self.list_medicines())

    def save_stock_updates(self, updated_stocks: Dict[str, int]) -> None:
        """Persist stock levels, keyed by medicine id, back to Excel."""
        stock_col = self._columns.get("quantity")
        if stock_col is None:
            raise ValueError("Missing required columns in Excel: Total Stock Units")
        for row_idx, row in enumerate(self._sheet.iter_rows(min_row=2), start=2):
            medicine_id = self._row_id(row_idx, row)
            if medicine_id in updated_stocks:
                row[stock_col - 1].value = updated_stocks[medicine_id]
        self._workbook.save(self.path)

    @staticmethod
    def write_template(path: Path | str, sheet_name: Optional[str] = None) -> Path:
        """Create an empty catalog workbook with the expected headers."""
        path = Path(path)
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = sheet_name or config.EXCEL_SHEET_NAME
        sheet.append(TEMPLATE_HEADERS)
        path.parent.mkdir(parents=True, exist_ok=True)
        workbook.save(path)
        return path

    @staticmethod
    def _to_float(value, default: Optional[float]) -> Optional[float]:
        if value in (None, ""):
            return default
        try:
            return float(value)
        except (TypeError, ValueError):
            return default

    @staticmethod
    def _to_int(value, default: int) -> int:
        if value in (None, ""):
            return default
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    @staticmethod
    def _to_date(value) -> Optional[date]:
        if value in (None, ""):
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        try:
            return date.fromisoformat(str(value).strip()[:10])
        except ValueError:
            logger.warning("Unparsable expiry date %r", value)
            return None
