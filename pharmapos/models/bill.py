"""Bill data models."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Tuple

from pharmapos import config
from pharmapos.models.medicine import CustomerType


class QuantityType(str, Enum):
    UNITS = "units"
    BOXES = "boxes"


class BillLifecycle(str, Enum):
    ACTIVE = "active"
    SAVED = "saved"


@dataclass
class CustomerDetails:
    name: str = ""
    phone: str = ""
    customer_type: CustomerType = CustomerType.GENERAL


@dataclass
class BillLineItem:
    """One add-to-bill action. Money fields derive from price, quantity and discount."""

    item_id: str
    medicine_id: str
    name: str
    unit_price: float
    quantity: int
    quantity_type: QuantityType
    discount_percentage: float = 0.0
    generic_name: str = "N/A"
    company_name: str = "N/A"

    @property
    def subtotal(self) -> float:
        return self.unit_price * self.quantity

    @property
    def discount_amount(self) -> float:
        return self.subtotal * (self.discount_percentage / 100.0)

    @property
    def total(self) -> float:
        return self.subtotal - self.discount_amount

    @property
    def display_text(self) -> str:
        return f"{self.quantity} {self.quantity_type.value}"

    def atomic_units(self, units_per_box: int) -> int:
        if self.quantity_type == QuantityType.BOXES:
            return self.quantity * units_per_box
        return self.quantity

    def to_dict(self) -> Dict:
        return {
            "itemId": self.item_id,
            "medicineId": self.medicine_id,
            "name": self.name,
            "genericName": self.generic_name,
            "companyName": self.company_name,
            "unitPrice": self.unit_price,
            "quantity": self.quantity,
            "quantityType": self.quantity_type.value,
            "displayText": self.display_text,
            "discountPercentage": self.discount_percentage,
            "subtotal": self.subtotal,
            "discountAmount": self.discount_amount,
            "total": self.total,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "BillLineItem":
        return cls(
            item_id=str(data["itemId"]),
            medicine_id=str(data["medicineId"]),
            name=data.get("name", ""),
            generic_name=data.get("genericName", "N/A"),
            company_name=data.get("companyName", "N/A"),
            unit_price=float(data["unitPrice"]),
            quantity=int(data["quantity"]),
            quantity_type=QuantityType(data["quantityType"]),
            discount_percentage=float(data.get("discountPercentage", 0.0)),
        )


def _sum_totals(items, tax_rate_percent: float) -> Tuple[float, float, float, float]:
    subtotal = sum(item.subtotal for item in items)
    discount = sum(item.discount_amount for item in items)
    tax = (subtotal - discount) * (tax_rate_percent / 100.0)
    return subtotal, discount, tax, subtotal - discount + tax


@dataclass
class Bill:
    """The in-progress bill. Aggregates are always computed from the lines."""

    customer: CustomerDetails = field(default_factory=CustomerDetails)
    bill_date: date = field(default_factory=date.today)
    items: List[BillLineItem] = field(default_factory=list)
    tax_rate_percent: float = config.TAX_RATE_PERCENT
    lifecycle: BillLifecycle = field(default=BillLifecycle.ACTIVE, init=False)

    @property
    def subtotal(self) -> float:
        return _sum_totals(self.items, self.tax_rate_percent)[0]

    @property
    def discount(self) -> float:
        return _sum_totals(self.items, self.tax_rate_percent)[1]

    @property
    def tax(self) -> float:
        return _sum_totals(self.items, self.tax_rate_percent)[2]

    @property
    def grand_total(self) -> float:
        return _sum_totals(self.items, self.tax_rate_percent)[3]

    def is_empty(self) -> bool:
        return not self.items

    def find_item(self, item_id: str) -> BillLineItem | None:
        for item in self.items:
            if item.item_id == item_id:
                return item
        return None


@dataclass(frozen=True)
class SavedBill:
    """Immutable snapshot of a bill that has been stored."""

    id: str
    saved_at: datetime
    customer: CustomerDetails
    bill_date: date
    items: Tuple[BillLineItem, ...]
    tax_rate_percent: float = config.TAX_RATE_PERCENT
    lifecycle: BillLifecycle = field(default=BillLifecycle.SAVED, init=False)

    @classmethod
    def snapshot(cls, bill: Bill, bill_id: str, saved_at: datetime) -> "SavedBill":
        return cls(
            id=bill_id,
            saved_at=saved_at,
            customer=copy.deepcopy(bill.customer),
            bill_date=bill.bill_date,
            items=tuple(copy.deepcopy(item) for item in bill.items),
            tax_rate_percent=bill.tax_rate_percent,
        )

    def to_bill(self) -> Bill:
        """Return an active, independently mutable copy."""
        return Bill(
            customer=copy.deepcopy(self.customer),
            bill_date=self.bill_date,
            items=[copy.deepcopy(item) for item in self.items],
            tax_rate_percent=self.tax_rate_percent,
        )

    @property
    def subtotal(self) -> float:
        return _sum_totals(self.items, self.tax_rate_percent)[0]

    @property
    def discount(self) -> float:
        return _sum_totals(self.items, self.tax_rate_percent)[1]

    @property
    def tax(self) -> float:
        return _sum_totals(self.items, self.tax_rate_percent)[2]

    @property
    def grand_total(self) -> float:
        return _sum_totals(self.items, self.tax_rate_percent)[3]

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "savedAt": self.saved_at.isoformat(),
            "customerName": self.customer.name,
            "customerPhone": self.customer.phone,
            "customerType": self.customer.customer_type.value,
            "date": self.bill_date.isoformat(),
            "items": [item.to_dict() for item in self.items],
            "taxRatePercent": self.tax_rate_percent,
            "subtotal": self.subtotal,
            "discount": self.discount,
            "tax": self.tax,
            "grandTotal": self.grand_total,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "SavedBill":
        return cls(
            id=str(data["id"]),
            saved_at=datetime.fromisoformat(data["savedAt"]),
            customer=CustomerDetails(
                name=data.get("customerName", ""),
                phone=data.get("customerPhone", ""),
                customer_type=CustomerType(data.get("customerType", CustomerType.GENERAL.value)),
            ),
            bill_date=date.fromisoformat(data["date"]),
            items=tuple(BillLineItem.from_dict(item) for item in data.get("items", [])),
            tax_rate_percent=float(data.get("taxRatePercent", config.TAX_RATE_PERCENT)),
        )


def format_currency(amount: float) -> str:
    """Return amount formatted to two decimals."""
    return f"{amount:.2f}"
