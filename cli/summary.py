#!/usr/bin/env python3

from datetime import date

from dates import current_date, parse_year_month
from logger import get_logger
from tools.dashboard import (
    get_cashflow,
    get_category_comparison,
    get_expense_breakdown,
    get_overview,
)

logger = get_logger()


def _money(value) -> str:
    return f"{value:,.0f}"


def cmd_summary(args, services):
    """Print the dashboard for one month."""
    if args.month:
        year, month = parse_year_month(args.month)
        today = date(year, month, 1)
    else:
        today = current_date()
    currency = services.settings.get().currency

    overview = get_overview(services, today)
    summary = overview.summary
    logger.info(f"Summary for {summary.year:04d}-{summary.month:02d} ({currency})")
    logger.info("=" * 60)
    logger.info(f"Income:        {_money(summary.total_income):>18}")
    logger.info(f"Expense:       {_money(summary.total_expense):>18}")
    logger.info(f"Surplus:       {_money(summary.surplus):>18}  ({summary.surplus_rate:.1f}%)")
    logger.info(f"Transactions:  {summary.transaction_count:>18}")

    breakdown = get_expense_breakdown(services, summary.year, summary.month)
    if breakdown:
        logger.info("\nExpenses by category:")
        for entry in breakdown:
            logger.info(
                f"  {entry.category_name:<24} {_money(entry.amount):>14}  {entry.percentage:5.1f}%"
            )

    comparison = get_category_comparison(services, summary.year, summary.month)
    if comparison:
        logger.info("\nCompared with previous month:")
        for entry in comparison:
            logger.info(
                f"  {entry.category_name:<24} {_money(entry.change):>14}  {entry.change_percentage:+.1f}%"
            )

    logger.info(f"\nCashflow, last {args.months} months:")
    for point in get_cashflow(services, args.months, today):
        logger.info(
            f"  {point.month}  in {_money(point.income):>14}  out {_money(point.expense):>14}"
        )

    fund = overview.emergency_fund
    logger.info(
        f"\nEmergency fund: {_money(fund.current_amount)} of {_money(fund.target_amount)} "
        f"({fund.progress:.0f}%)"
    )
    logger.info(
        f"Savings goals: {_money(overview.savings.total_saved)} of "
        f"{_money(overview.savings.total_target)} ({overview.savings.overall_progress:.0f}%)"
    )
    logger.info(
        f"Installments: {overview.installments.active_count} active, "
        f"{_money(overview.installments.total_monthly_amount)} per month"
    )
    logger.info(
        f"Monthly needs: {overview.needs.paid_count} paid, {overview.needs.unpaid_count} unpaid, "
        f"{_money(overview.needs.total_actual)} of {_money(overview.needs.total_budget)}"
    )
    logger.info(f"Wishlist remaining: {_money(overview.wishlist.total_remaining)}")
    logger.info(
        f"Net worth: {_money(overview.net_worth)} "
        f"(assets {_money(overview.total_assets)}, liabilities {_money(overview.total_liabilities)})"
    )


def setup_parser(subparsers):
    """Setup summary subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "summary",
        help="Show the dashboard",
        description="Monthly income, expenses, budgets and net worth",
    )
    parser.add_argument("--month", help="Month to show (YYYY-MM), defaults to the current one")
    parser.add_argument("--months", type=int, default=6, help="Months of cashflow to show")
    parser.set_defaults(func=cmd_summary)
