#!/usr/bin/env python3

import sys

from dates import current_date, month_bounds, parse_year_month
from logger import get_logger
from models.transaction import PAYMENT_METHODS, TRANSACTION_TYPES
from validators import validate_transaction

logger = get_logger()


def _resolve_category(services, name, type):
    category = services.categories.find_by_name(name, type)
    if category is None:
        logger.error(f"Category '{name}' not found.")
        logger.info("Use 'python -m cli categories list' to see available categories.")
        sys.exit(1)
    return category


def cmd_list(args, services):
    """List transactions, newest first."""
    start_date = end_date = None
    if args.month:
        start_date, end_date = month_bounds(*parse_year_month(args.month))
    category_id = None
    if args.category:
        category_id = _resolve_category(services, args.category, None).id

    transactions = services.transactions.filter(
        start_date=start_date,
        end_date=end_date,
        type=args.type,
        category_id=category_id,
        search=args.search,
    )

    if not transactions:
        logger.info("No transactions found.")
        return

    names = services.categories.name_map()
    for t in transactions[: args.limit]:
        note = f"  {t.note}" if t.note else ""
        logger.info(
            f"{t.date.isoformat()}  {t.type:<8} {t.amount:>14,}  "
            f"{names.get(t.category_id, 'Unknown')}{note}"
        )
    logger.info(f"\nShown {min(len(transactions), args.limit)} of {len(transactions)} transaction(s)")


def cmd_add(args, services):
    """Record a new transaction."""
    # Transfers may use a category of any type
    category_type = None if args.type == "transfer" else args.type
    category = _resolve_category(services, args.category, category_type)
    subcategory_id = None
    if args.subcategory:
        matches = [
            s for s in category.subcategories
            if s.name.lower() == args.subcategory.strip().lower()
        ]
        if not matches:
            logger.error(f"Subcategory '{args.subcategory}' not found in {category.name}.")
            sys.exit(1)
        subcategory_id = matches[0].id

    data = {
        "date": args.date or current_date().isoformat(),
        "type": args.type,
        "amount": args.amount,
        "category_id": category.id,
        "payment_method": args.payment_method,
    }
    result = validate_transaction(data)
    if not result.is_valid:
        for error in result.errors:
            logger.error(f"{error.field}: {error.message}")
        sys.exit(1)

    transaction = services.transactions.add(
        subcategory_id=subcategory_id, note=args.note, tags=args.tag or (), **data
    )
    logger.info(f"✓ Transaction recorded with ID: {transaction.id}")


def setup_parser(subparsers):
    """Setup transactions subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "transactions",
        help="Record and list transactions",
        description="Record and list income, expense and transfer transactions",
    )
    transactions_subparsers = parser.add_subparsers(
        title="subcommands", dest="subcommand", required=True
    )

    list_parser = transactions_subparsers.add_parser("list", help="List transactions")
    list_parser.add_argument("--month", help="Only this month (YYYY-MM)")
    list_parser.add_argument("--type", choices=TRANSACTION_TYPES)
    list_parser.add_argument("--category", help="Category name")
    list_parser.add_argument("--search", help="Text to look for in notes and tags")
    list_parser.add_argument("--limit", type=int, default=50)
    list_parser.set_defaults(func=cmd_list)

    add_parser = transactions_subparsers.add_parser("add", help="Record a transaction")
    add_parser.add_argument("type", choices=TRANSACTION_TYPES)
    add_parser.add_argument("amount", help="Positive amount")
    add_parser.add_argument("--category", required=True, help="Category name")
    add_parser.add_argument("--subcategory", help="Subcategory name")
    add_parser.add_argument("--date", help="YYYY-MM-DD, defaults to today")
    add_parser.add_argument("--note")
    add_parser.add_argument("--payment-method", choices=PAYMENT_METHODS)
    add_parser.add_argument("--tag", action="append", help="Label, may be repeated")
    add_parser.set_defaults(func=cmd_add)
