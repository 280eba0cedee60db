from datetime import date, datetime

import pytest
from openpyxl import Workbook, load_workbook

from pharmapos.data.excel_repo import TEMPLATE_HEADERS, ExcelRepository, map_header


def _workbook(path, headers, rows, sheet_name="Medicines"):
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = sheet_name
    sheet.append(headers)
    for row in rows:
        sheet.append(row)
    workbook.save(path)
    return path


@pytest.mark.parametrize(
    "header,field",
    [
        ("Medicine Name", "name"),
        ("Generic Name", "generic_name"),
        ("Manufacturer", "company_name"),
        ("Medicine Type", "type"),
        ("Units Per Box", "units_per_box"),
        ("Total Stock Units", "quantity"),
        ("Low Stock Threshold", "low_stock_threshold"),
        ("Customer Selling Price", "customer_selling_price"),
        ("Doctor Selling Price", "doctor_selling_price"),
        ("Medical Professional Selling Price", "medical_professional_selling_price"),
        ("Medical Professional Discount %", "medical_professional_discount_percentage"),
        ("Expiry Date", "expiry_date"),
        ("ID", "id"),
        ("Rack", None),
    ],
)
def test_map_header(header, field):
    assert map_header(header) == field


def test_list_medicines_with_defaults(tmp_path):
    path = _workbook(
        tmp_path / "catalog.xlsx",
        TEMPLATE_HEADERS,
        [
            ["Panadol", "Paracetamol", "GSK", "Tablet", 20, 200, 40, 35, None, datetime(2027, 3, 1), 30],
            [None, None, None, None, None, 12, 10, None, None, "not a date", None],
            [None] * len(TEMPLATE_HEADERS),
        ],
    )
    medicines = ExcelRepository(path).list_medicines(today=date(2026, 10, 19))
    assert len(medicines) == 2

    panadol, imported = medicines
    assert panadol.id == "1"
    assert panadol.units_per_box == 20
    assert panadol.quantity == 200
    assert panadol.doctor_selling_price == 35
    assert panadol.expiry_date == date(2027, 3, 1)
    assert panadol.low_stock_threshold == 30

    assert imported.name == "Imported Medicine 2"
    assert imported.type == "Tablet"
    assert imported.units_per_box == 1
    assert imported.low_stock_threshold == 50
    assert imported.expiry_date == date(2027, 10, 19)


def test_missing_name_column(tmp_path):
    path = _workbook(tmp_path / "catalog.xlsx", ["Stock", "Price"], [[1, 2]])
    with pytest.raises(ValueError, match="Missing required columns"):
        ExcelRepository(path)


def test_duplicate_mapping_rejected(tmp_path):
    path = _workbook(tmp_path / "catalog.xlsx", ["Name", "Medicine Name"], [])
    with pytest.raises(ValueError, match="already mapped"):
        ExcelRepository(path)


def test_missing_file_or_sheet(tmp_path):
    with pytest.raises(FileNotFoundError):
        ExcelRepository(tmp_path / "nope.xlsx")
    path = _workbook(tmp_path / "catalog.xlsx", TEMPLATE_HEADERS, [], sheet_name="Other")
    with pytest.raises(ValueError, match="not found"):
        ExcelRepository(path)


def test_stock_write_back(tmp_path):
    path = _workbook(
        tmp_path / "catalog.xlsx",
        ["Medicine Name", "Units Per Box", "Total Stock Units", "Customer Selling Price"],
        [["Panadol", 20, 200, 40], ["Brufen", 10, 50, 30]],
    )
    repo = ExcelRepository(path)
    ledger = repo.load_ledger()
    ledger.deduct("1", 20)
    repo.save_stock_updates(ledger.stock_levels())

    sheet = load_workbook(path)["Medicines"]
    assert [row[2] for row in sheet.iter_rows(min_row=2, values_only=True)] == [180, 50]


def test_write_template(tmp_path):
    path = ExcelRepository.write_template(tmp_path / "template.xlsx")
    repo = ExcelRepository(path)
    assert repo.list_medicines() == []


def test_stock_write_back_keyed_by_id_column(tmp_path):
    path = _workbook(
        tmp_path / "catalog.xlsx",
        ["ID", "Medicine Name", "Units Per Box", "Total Stock Units"],
        [["P-500", "Panadol", 20, 200], ["P-EX", "Panadol", 10, 60]],
    )
    repo = ExcelRepository(path)
    ledger = repo.load_ledger()
    assert [m.id for m in ledger.list_medicines()] == ["P-500", "P-EX"]
    ledger.deduct("P-EX", 10)
    repo.save_stock_updates(ledger.stock_levels())

    sheet = load_workbook(path)["Medicines"]
    assert [row[3] for row in sheet.iter_rows(min_row=2, values_only=True)] == [200, 50]


def test_out_of_range_prices_and_discounts_clamped(tmp_path):
    path = _workbook(
        tmp_path / "catalog.xlsx",
        ["Medicine Name", "Customer Selling Price", "Customer Discount %", "Doctor Discount %"],
        [["Brufen", -30, 150, -5]],
    )
    medicine = ExcelRepository(path).list_medicines()[0]
    assert medicine.customer_selling_price == 0
    assert medicine.customer_discount_percentage == 100
    assert medicine.doctor_discount_percentage == 0
