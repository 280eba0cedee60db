"""Dataclasses representing medicines in the catalog."""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional

from pharmapos import config


class CustomerType(str, Enum):
    GENERAL = "General Customer"
    DOCTOR = "Doctor"
    MEDICAL_PROFESSIONAL = "Medical Professional"


class StockStatus(str, Enum):
    OUT_OF_STOCK = "outOfStock"
    LOW_STOCK = "lowStock"
    IN_STOCK = "inStock"


def add_months(day: date, months: int) -> date:
    """Shift a date by whole months, clamping to the last day of the month."""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


PRICE_FIELDS = (
    "customer_selling_price",
    "doctor_selling_price",
    "medical_professional_selling_price",
    "purchase_price",
)
DISCOUNT_FIELDS = (
    "customer_discount_percentage",
    "doctor_discount_percentage",
    "medical_professional_discount_percentage",
)


@dataclass
class Medicine:
    id: str
    name: str
    generic_name: str = ""
    company_name: str = ""
    type: str = "Tablet"
    quantity: int = 0
    units_per_box: int = 1
    low_stock_threshold: int = 0
    customer_selling_price: float = 0.0
    customer_discount_percentage: float = 0.0
    doctor_selling_price: float = 0.0
    doctor_discount_percentage: float = 0.0
    medical_professional_selling_price: float = 0.0
    medical_professional_discount_percentage: float = 0.0
    purchase_price: float = 0.0
    expiry_date: Optional[date] = None

    def __post_init__(self) -> None:
        if self.quantity < 0:
            raise ValueError(f"Stock for '{self.name}' cannot be negative.")
        if self.units_per_box <= 0:
            raise ValueError(f"Units per box for '{self.name}' must be positive.")
        for field_name in PRICE_FIELDS:
            if getattr(self, field_name) < 0:
                raise ValueError(f"{field_name} for '{self.name}' cannot be negative.")
        for field_name in DISCOUNT_FIELDS:
            if not 0 <= getattr(self, field_name) <= 100:
                raise ValueError(f"{field_name} for '{self.name}' must be between 0 and 100.")

    @property
    def in_stock(self) -> bool:
        return self.quantity > 0

    @property
    def total_boxes(self) -> int:
        return self.quantity // self.units_per_box

    @property
    def effective_threshold(self) -> int:
        return self.low_stock_threshold or config.DEFAULT_LOW_STOCK_THRESHOLD

    def stock_status(self) -> StockStatus:
        if self.quantity == 0:
            return StockStatus.OUT_OF_STOCK
        if self.quantity <= self.effective_threshold:
            return StockStatus.LOW_STOCK
        return StockStatus.IN_STOCK

    def price_for(self, customer_type: CustomerType) -> float:
        """Per-box selling price for a customer tier.

        Doctor and medical professional prices fall back to the general
        customer price when they are not set.
        """
        if customer_type == CustomerType.DOCTOR:
            return self.doctor_selling_price or self.customer_selling_price
        if customer_type == CustomerType.MEDICAL_PROFESSIONAL:
            return self.medical_professional_selling_price or self.customer_selling_price
        return self.customer_selling_price

    def discount_for(self, customer_type: CustomerType) -> float:
        if customer_type == CustomerType.DOCTOR:
            return self.doctor_discount_percentage
        if customer_type == CustomerType.MEDICAL_PROFESSIONAL:
            return self.medical_professional_discount_percentage
        return self.customer_discount_percentage

    def is_expiry_near(self, today: Optional[date] = None) -> bool:
        """True when the medicine expires within the warning window."""
        if self.expiry_date is None:
            return False
        today = today or date.today()
        return self.expiry_date <= add_months(today, config.EXPIRY_WARNING_MONTHS)

    @property
    def formatted_expiry(self) -> str:
        if self.expiry_date is None:
            return "N/A"
        return self.expiry_date.strftime("%m/%Y")
