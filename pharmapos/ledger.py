"""In-memory stock ledger over the medicine catalog."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from pharmapos.errors import InsufficientStockError, MedicineNotFoundError
from pharmapos.models.medicine import Medicine

logger = logging.getLogger(__name__)


class StockLedger:
    """Owns the medicine list and the atomic-unit stock of each medicine.

    ``quantity`` is changed only through :meth:`deduct` and :meth:`restore`
    once a medicine is registered.
    """

    def __init__(self, medicines: Iterable[Medicine] = ()) -> None:
        self._medicines: Dict[str, Medicine] = {}
        for medicine in medicines:
            self.add_medicine(medicine)

    def add_medicine(self, medicine: Medicine) -> None:
        if medicine.id in self._medicines:
            raise ValueError(f"Duplicate medicine id '{medicine.id}'.")
        self._medicines[medicine.id] = medicine

    def list_medicines(self) -> List[Medicine]:
        """Return medicines in registration order."""
        return list(self._medicines.values())

    def find(self, medicine_id: str) -> Optional[Medicine]:
        return self._medicines.get(medicine_id)

    def get(self, medicine_id: str) -> Medicine:
        medicine = self._medicines.get(medicine_id)
        if medicine is None:
            raise MedicineNotFoundError(medicine_id)
        return medicine

    def available(self, medicine_id: str) -> int:
        return self.get(medicine_id).quantity

    def deduct(self, medicine_id: str, units: int) -> None:
        """Take atomic units out of stock. Raises if not enough is on hand."""
        if units <= 0:
            raise ValueError("Quantity must be positive.")
        medicine = self.get(medicine_id)
        if units > medicine.quantity:
            raise InsufficientStockError(medicine.name, medicine.quantity, units)
        medicine.quantity -= units
        logger.debug("Deducted %d units of %s, %d left", units, medicine.name, medicine.quantity)

    def restore(self, medicine_id: str, units: int) -> None:
        """Put atomic units back into stock."""
        if units <= 0:
            raise ValueError("Quantity must be positive.")
        medicine = self.get(medicine_id)
        medicine.quantity += units
        logger.debug("Restored %d units of %s, %d left", units, medicine.name, medicine.quantity)

    def stock_levels(self) -> Dict[str, int]:
        """Return current quantity keyed by medicine id, for write-back."""
        return {medicine.id: medicine.quantity for medicine in self._medicines.values()}
