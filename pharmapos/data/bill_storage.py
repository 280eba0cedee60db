"""JSON file storage for saved (temporary) bills."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from pharmapos import config
from pharmapos.models.bill import SavedBill

logger = logging.getLogger(__name__)


class JsonBillStorage:
    """Keeps saved bills keyed by id and rewrites the whole file on change."""

    def __init__(self, path: Path | str = None) -> None:
        self.path: Path = Path(path) if path else config.BILLS_PATH
        self._bills: Dict[str, SavedBill] = {}
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            return
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            bills = [SavedBill.from_dict(entry) for entry in raw]
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Could not read saved bills from %s: %s", self.path, exc)
            return
        self._bills = {bill.id: bill for bill in bills}

    def _write(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = [bill.to_dict() for bill in self._bills.values()]
        self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def list_bills(self) -> List[SavedBill]:
        """Return saved bills in insertion order."""
        return list(self._bills.values())

    def get(self, bill_id: str) -> Optional[SavedBill]:
        return self._bills.get(bill_id)

    def insert(self, bill: SavedBill) -> None:
        self._bills[bill.id] = bill
        self._write()

    def delete(self, bill_id: str) -> bool:
        """Remove a bill; returns False when no bill has that id."""
        if self._bills.pop(bill_id, None) is None:
            return False
        self._write()
        return True
