"""Exceptions raised by the stock ledger and bill composer."""


class PharmacyError(Exception):
    """Base class for all errors raised by this package."""


class BillingError(PharmacyError, ValueError):
    """A bill operation was rejected at its precondition check."""


class NoProductSelectedError(BillingError):
    pass


class InvalidQuantityError(BillingError):
    pass


class OutOfStockError(BillingError):
    pass


class InsufficientStockError(BillingError):
    def __init__(self, name: str, available: int, requested: int) -> None:
        super().__init__(
            f"Insufficient stock for '{name}'. "
            f"Available: {available}, requested: {requested}."
        )
        self.name = name
        self.available = available
        self.requested = requested


class EmptyBillError(BillingError):
    pass


class MedicineNotFoundError(PharmacyError, KeyError):
    def __init__(self, medicine_id) -> None:
        super().__init__(f"Medicine '{medicine_id}' not found.")
        self.medicine_id = medicine_id

    def __str__(self) -> str:
        return self.args[0]


class LineItemNotFoundError(PharmacyError, KeyError):
    def __init__(self, item_id) -> None:
        super().__init__(f"Bill line '{item_id}' not found.")
        self.item_id = item_id

    def __str__(self) -> str:
        return self.args[0]


class SavedBillNotFoundError(PharmacyError, KeyError):
    def __init__(self, bill_id) -> None:
        super().__init__(f"Saved bill '{bill_id}' not found.")
        self.bill_id = bill_id

    def __str__(self) -> str:
        return self.args[0]
