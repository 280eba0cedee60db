"""Conversion between atomic units and boxes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class DerivationSource(str, Enum):
    """Which stock field the operator edited last."""

    FROM_UNITS = "fromUnits"
    FROM_BOXES = "fromBoxes"


@dataclass(frozen=True)
class StockFields:
    total_units: Optional[int]
    total_boxes: Optional[int]


def _check_factor(units_per_box: int) -> None:
    if units_per_box <= 0:
        raise ValueError("Units per box must be a positive integer.")


def units_to_boxes(units: int, units_per_box: int) -> int:
    _check_factor(units_per_box)
    return units // units_per_box


def boxes_to_units(boxes: int, units_per_box: int) -> int:
    _check_factor(units_per_box)
    return boxes * units_per_box


def unit_price_from_box_price(box_price: float, units_per_box: int) -> float:
    _check_factor(units_per_box)
    return box_price / units_per_box


def reconcile_stock(
    total_units: Optional[int],
    total_boxes: Optional[int],
    units_per_box: Optional[int],
    source: Optional[DerivationSource],
) -> StockFields:
    """Re-derive the stock field that was not edited last.

    Call this whenever either quantity field or the conversion factor
    changes. Without a factor or a source, the fields are returned as given;
    an empty source field leaves its counterpart untouched.
    """
    if not units_per_box or source is None:
        return StockFields(total_units, total_boxes)
    if source == DerivationSource.FROM_UNITS:
        if total_units is None:
            return StockFields(total_units, total_boxes)
        return StockFields(total_units, units_to_boxes(total_units, units_per_box))
    if total_boxes is None:
        return StockFields(total_units, total_boxes)
    return StockFields(boxes_to_units(total_boxes, units_per_box), total_boxes)
