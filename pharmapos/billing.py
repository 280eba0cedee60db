"""Bill composition on top of the stock ledger."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from pharmapos import config
from pharmapos.data.bill_storage import JsonBillStorage
from pharmapos.errors import (
    BillingError,
    EmptyBillError,
    InsufficientStockError,
    InvalidQuantityError,
    LineItemNotFoundError,
    MedicineNotFoundError,
    NoProductSelectedError,
    OutOfStockError,
    SavedBillNotFoundError,
)
from pharmapos.ledger import StockLedger
from pharmapos.models.bill import Bill, BillLineItem, CustomerDetails, QuantityType, SavedBill
from pharmapos.models.medicine import CustomerType, Medicine
from pharmapos.reconciler import boxes_to_units, unit_price_from_box_price

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return uuid.uuid4().hex


def _check_discount(discount_percentage: float) -> None:
    if not 0 <= discount_percentage <= 100:
        raise BillingError("Discount must be between 0 and 100 percent.")


class BillComposer:
    """Owns the active bill and keeps the ledger in step with its lines.

    Every operation checks its preconditions before touching the bill or the
    ledger, so a rejected call leaves both unchanged.
    """

    def __init__(
        self,
        ledger: StockLedger,
        storage: JsonBillStorage,
        tax_rate_percent: float | None = None,
        id_factory: Callable[[], str] = _new_id,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.ledger = ledger
        self.storage = storage
        self.tax_rate_percent = (
            config.TAX_RATE_PERCENT if tax_rate_percent is None else tax_rate_percent
        )
        self._new_id = id_factory
        self._clock = clock
        self.bill = self._fresh_bill()
        self.selected: Optional[Medicine] = None

    def _fresh_bill(self) -> Bill:
        return Bill(tax_rate_percent=self.tax_rate_percent)

    # Customer and product selection

    def set_customer_details(
        self, name: str, phone: str, customer_type: CustomerType = CustomerType.GENERAL
    ) -> None:
        self.bill.customer = CustomerDetails(name=name, phone=phone, customer_type=customer_type)

    def select_product(self, medicine_id: str) -> Medicine:
        medicine = self.ledger.get(medicine_id)
        if not medicine.in_stock:
            raise OutOfStockError(f"'{medicine.name}' is out of stock.")
        self.selected = medicine
        return medicine

    def clear_selection(self) -> None:
        self.selected = None

    def selected_price(self) -> Tuple[float, float]:
        """Box price and default discount of the selection for the bill's customer."""
        if self.selected is None:
            raise NoProductSelectedError("Please select a medicine first.")
        tier = self.bill.customer.customer_type
        return self.selected.price_for(tier), self.selected.discount_for(tier)

    # Line operations

    def add_item_to_bill(
        self,
        unit_qty: int = 0,
        box_qty: int = 0,
        selling_price: float | None = None,
        discount_percentage: float | None = None,
    ) -> BillLineItem:
        """Add a new line for the selected medicine and deduct its stock.

        Units win when both quantities are given. ``selling_price`` is the
        per-box price; it and the discount default to the customer's tier.
        """
        if self.selected is None:
            raise NoProductSelectedError("Please select a medicine first.")
        medicine = self.ledger.get(self.selected.id)

        if unit_qty > 0:
            quantity, quantity_type = unit_qty, QuantityType.UNITS
            atomic = unit_qty
        elif box_qty > 0:
            quantity, quantity_type = box_qty, QuantityType.BOXES
            atomic = boxes_to_units(box_qty, medicine.units_per_box)
        else:
            raise InvalidQuantityError("Enter a quantity in units or boxes.")

        default_price, default_discount = self.selected_price()
        box_price = default_price if selling_price is None else selling_price
        discount = default_discount if discount_percentage is None else discount_percentage
        if box_price < 0:
            raise BillingError("Selling price cannot be negative.")
        _check_discount(discount)
        if atomic > medicine.quantity:
            raise InsufficientStockError(medicine.name, medicine.quantity, atomic)

        if quantity_type == QuantityType.UNITS:
            unit_price = unit_price_from_box_price(box_price, medicine.units_per_box)
        else:
            unit_price = box_price

        self.ledger.deduct(medicine.id, atomic)
        item = BillLineItem(
            item_id=self._new_id(),
            medicine_id=medicine.id,
            name=medicine.name,
            generic_name=medicine.generic_name or "N/A",
            company_name=medicine.company_name or "N/A",
            unit_price=unit_price,
            quantity=quantity,
            quantity_type=quantity_type,
            discount_percentage=discount,
        )
        self.bill.items.append(item)
        self.selected = None
        return item

    def _get_item(self, item_id: str) -> BillLineItem:
        item = self.bill.find_item(item_id)
        if item is None:
            raise LineItemNotFoundError(item_id)
        return item

    def _restore_line(self, item: BillLineItem) -> None:
        medicine = self.ledger.find(item.medicine_id)
        if medicine is None:
            logger.warning(
                "Medicine %s of line %s is no longer in the catalog; stock not restored",
                item.medicine_id,
                item.item_id,
            )
            return
        self.ledger.restore(medicine.id, item.atomic_units(medicine.units_per_box))

    def remove_line(self, item_id: str) -> None:
        item = self._get_item(item_id)
        self._restore_line(item)
        self.bill.items.remove(item)

    def update_line_quantity(self, item_id: str, new_quantity: int) -> None:
        """Change a line's quantity and move the stock difference through the ledger.

        A quantity of zero or less removes the line.
        """
        item = self._get_item(item_id)
        if new_quantity <= 0:
            self.remove_line(item_id)
            return
        if new_quantity == item.quantity:
            return

        medicine = self.ledger.find(item.medicine_id)
        if medicine is None:
            if new_quantity > item.quantity:
                raise MedicineNotFoundError(item.medicine_id)
            logger.warning(
                "Medicine %s of line %s is no longer in the catalog; stock not restored",
                item.medicine_id,
                item.item_id,
            )
        else:
            factor = medicine.units_per_box if item.quantity_type == QuantityType.BOXES else 1
            delta = (new_quantity - item.quantity) * factor
            if delta > 0:
                self.ledger.deduct(medicine.id, delta)
            else:
                self.ledger.restore(medicine.id, -delta)
        item.quantity = new_quantity

    def update_line_discount(self, item_id: str, discount_percentage: float) -> None:
        item = self._get_item(item_id)
        _check_discount(discount_percentage)
        item.discount_percentage = discount_percentage

    def outstanding_units(self, medicine_id: str) -> int:
        """Atomic units of a medicine held by lines of the active bill."""
        medicine = self.ledger.get(medicine_id)
        return sum(
            item.atomic_units(medicine.units_per_box)
            for item in self.bill.items
            if item.medicine_id == medicine_id
        )

    # Bill lifecycle

    def save_temporary_bill(self) -> SavedBill:
        """Store the active bill and start a new one. Stock stays deducted."""
        if self.bill.is_empty():
            raise EmptyBillError("Cannot save empty bill.")
        saved = SavedBill.snapshot(self.bill, bill_id=self._new_id(), saved_at=self._clock())
        self.storage.insert(saved)
        logger.info("Saved bill %s with %d items", saved.id, len(saved.items))
        self.bill = self._fresh_bill()
        return saved

    def load_temporary_bill(self, bill_id: str) -> Bill:
        """Reopen a saved bill as the active bill, without stock checks.

        The saved copy leaves storage so its lines are held by exactly one
        active bill. Lines of the bill being replaced go back to stock first.
        """
        saved = self.storage.get(bill_id)
        if saved is None:
            raise SavedBillNotFoundError(bill_id)
        self.clear_current_bill()
        self.storage.delete(bill_id)
        self.bill = saved.to_bill()
        logger.info("Reopened bill %s", bill_id)
        return self.bill

    def clear_current_bill(self) -> None:
        """Discard the active bill, restoring the stock held by its lines."""
        for item in self.bill.items:
            self._restore_line(item)
        self.bill = self._fresh_bill()

    def delete_temporary_bill(self, bill_id: str) -> None:
        if not self.storage.delete(bill_id):
            raise SavedBillNotFoundError(bill_id)
        logger.info("Deleted bill %s", bill_id)

    def temporary_bills(self) -> List[SavedBill]:
        return self.storage.list_bills()
