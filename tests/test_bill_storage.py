from datetime import datetime

from pharmapos.data.bill_storage import JsonBillStorage
from pharmapos.models.bill import Bill, BillLineItem, CustomerDetails, QuantityType, SavedBill


def _saved(bill_id):
    bill = Bill(
        customer=CustomerDetails("Ali", "0300"),
        items=[
            BillLineItem(
                item_id="l1",
                medicine_id="1",
                name="Amoxicillin",
                unit_price=5.0,
                quantity=4,
                quantity_type=QuantityType.UNITS,
            )
        ],
    )
    return SavedBill.snapshot(bill, bill_id, datetime(2026, 10, 19, 10, 0))


def test_insert_persists_across_instances(tmp_path):
    path = tmp_path / "nested" / "bills.json"
    storage = JsonBillStorage(path)
    storage.insert(_saved("a"))
    storage.insert(_saved("b"))

    reloaded = JsonBillStorage(path)
    assert [b.id for b in reloaded.list_bills()] == ["a", "b"]
    assert reloaded.get("a") == storage.get("a")
    assert reloaded.get("a").grand_total == 20


def test_last_write_wins(tmp_path):
    storage = JsonBillStorage(tmp_path / "bills.json")
    storage.insert(_saved("a"))
    storage.insert(_saved("a"))
    assert len(storage.list_bills()) == 1


def test_delete(tmp_path):
    path = tmp_path / "bills.json"
    storage = JsonBillStorage(path)
    storage.insert(_saved("a"))
    assert storage.delete("a")
    assert not storage.delete("a")
    assert JsonBillStorage(path).list_bills() == []


def test_corrupt_file_reads_as_empty(tmp_path):
    path = tmp_path / "bills.json"
    path.write_text("{not json", encoding="utf-8")
    assert JsonBillStorage(path).list_bills() == []
