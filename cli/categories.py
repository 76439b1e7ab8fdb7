#!/usr/bin/env python3

import sys

from logger import get_logger
from models.category import CATEGORY_TYPES
from validators import validate_category, validate_subcategory

logger = get_logger()


def cmd_list(args, services):
    """List categories and their subcategories."""
    categories = (
        services.categories.find_by_type(args.type)
        if args.type
        else services.categories.find_all()
    )
    if not categories:
        logger.info("No categories found.")
        return

    for category in categories:
        marker = " (default)" if category.is_default else ""
        logger.info(f"[{category.type}] {category.name}{marker}  ID: {category.id}")
        for subcategory in category.subcategories:
            logger.info(f"    - {subcategory.name}  ID: {subcategory.id}")

    logger.info(f"\nTotal categories: {len(categories)}")


def cmd_add(args, services):
    """Create a category, or a subcategory with --parent."""
    if args.parent:
        parent = services.categories.find_by_name(args.parent, args.type)
        if parent is None:
            logger.error(f"Category '{args.parent}' not found.")
            sys.exit(1)
        result = validate_subcategory(
            {"name": args.name}, [s.name for s in parent.subcategories]
        )
    else:
        result = validate_category(
            {"name": args.name, "type": args.type},
            services.categories.names(type=args.type),
        )

    if not result.is_valid:
        for error in result.errors:
            logger.error(f"{error.field}: {error.message}")
        sys.exit(1)

    if args.parent:
        subcategory = services.categories.add_subcategory(parent.id, args.name)
        logger.info(f"✓ Subcategory created with ID: {subcategory.id}")
    else:
        category = services.categories.add(args.name, args.type)
        logger.info(f"✓ Category created with ID: {category.id}")


def cmd_delete(args, services):
    """Delete a category by ID. Transactions keep their category ID."""
    category = services.categories.get(args.category_id)

    if not args.yes:
        confirm = input(f"Delete category '{category.name}'? (yes/no): ").strip().lower()
        if confirm != "yes":
            logger.info("Deletion cancelled.")
            return

    services.categories.delete(category.id)
    logger.info(f"✓ Category '{category.name}' deleted.")


def setup_parser(subparsers):
    """Setup categories subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "categories",
        help="Manage categories",
        description="List, create and delete categories and subcategories",
    )
    categories_subparsers = parser.add_subparsers(
        title="subcommands", dest="subcommand", required=True
    )

    list_parser = categories_subparsers.add_parser("list", help="List categories")
    list_parser.add_argument("--type", choices=CATEGORY_TYPES)
    list_parser.set_defaults(func=cmd_list)

    add_parser = categories_subparsers.add_parser("add", help="Create a category")
    add_parser.add_argument("name")
    add_parser.add_argument("--type", choices=CATEGORY_TYPES, default="expense")
    add_parser.add_argument("--parent", help="Create a subcategory of this category")
    add_parser.set_defaults(func=cmd_add)

    delete_parser = categories_subparsers.add_parser("delete", help="Delete a category by ID")
    delete_parser.add_argument("category_id")
    delete_parser.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    delete_parser.set_defaults(func=cmd_delete)
