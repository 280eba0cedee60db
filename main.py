"""Entry point: search the pharmacy catalog from the command line."""

import argparse
import logging
import sys

from pharmapos import config
from pharmapos.data.excel_repo import ExcelRepository
from pharmapos.models.bill import format_currency
from pharmapos.search import CatalogSearch


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Pharmacy catalog search")
    parser.add_argument("query", nargs="?", default="", help="medicine, generic, company or type")
    parser.add_argument("--excel", default=None, help=f"catalog workbook (default {config.EXCEL_PATH})")
    parser.add_argument("--sheet", default=None, help="sheet name")
    parser.add_argument("--template", metavar="PATH", help="write an empty catalog workbook and exit")
    args = parser.parse_args(argv)

    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)

    if args.template:
        ExcelRepository.write_template(args.template, args.sheet)
        print(f"Template written to {args.template}")
        return 0

    try:
        ledger = ExcelRepository(args.excel, args.sheet).load_ledger()
    except (OSError, ValueError) as exc:
        print(f"Failed to load Excel: {exc}", file=sys.stderr)
        return 1

    for result in CatalogSearch(ledger).search(args.query):
        medicine = result.medicine
        marker = "" if result.selectable else "  [not selectable]"
        print(
            f"{medicine.name:<30} {medicine.stock_status().value:<10} "
            f"{medicine.quantity:>6} units  {config.CURRENCY} "
            f"{format_currency(medicine.customer_selling_price):>10}  "
            f"exp {medicine.formatted_expiry}{marker}"
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
