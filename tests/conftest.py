from datetime import datetime

import pytest

from pharmapos.billing import BillComposer
from pharmapos.data.bill_storage import JsonBillStorage
from pharmapos.ledger import StockLedger
from pharmapos.models.medicine import Medicine


def make_catalog():
    return [
        Medicine(
            id="1",
            name="Amoxicillin",
            generic_name="Amoxicillin Trihydrate",
            company_name="GSK",
            type="Capsule",
            quantity=100,
            units_per_box=10,
            customer_selling_price=50.0,
            customer_discount_percentage=5.0,
            doctor_selling_price=45.0,
            doctor_discount_percentage=15.0,
        ),
        Medicine(
            id="2",
            name="Panadol",
            generic_name="Paracetamol",
            company_name="GSK",
            type="Tablet",
            quantity=200,
            units_per_box=20,
            customer_selling_price=40.0,
        ),
        Medicine(
            id="3",
            name="Augmentin",
            generic_name="Amoxicillin Clavulanate",
            company_name="GSK",
            type="Tablet",
            quantity=0,
            units_per_box=6,
            customer_selling_price=300.0,
        ),
    ]


@pytest.fixture
def ledger():
    return StockLedger(make_catalog())


@pytest.fixture
def storage(tmp_path):
    return JsonBillStorage(tmp_path / "bills.json")


@pytest.fixture
def composer(ledger, storage):
    counter = iter(range(1, 10_000))
    return BillComposer(
        ledger,
        storage,
        id_factory=lambda: f"id-{next(counter)}",
        clock=lambda: datetime(2026, 10, 19, 12, 30),
    )
