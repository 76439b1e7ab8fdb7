"""Input validation for every entity type.

Each ``validate_*`` function takes a mapping of (possibly partial) input
fields keyed by model attribute name and returns a ValidationResult listing
every rule that was violated. Nothing here raises or touches storage: the
caller decides whether to proceed.
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Iterable, List, Mapping, Optional

from dates import is_valid_date, is_valid_year_month
from models.asset import ASSET_TYPES, LIABILITY_TYPES
from models.category import CATEGORY_TYPES
from models.monthly_need import RECURRENCE_PERIODS
from models.transaction import PAYMENT_METHODS, TRANSACTION_TYPES
from models.wishlist import PRIORITIES, WISHLIST_STATUSES


@dataclass(frozen=True)
class ValidationError:
    """A single violated rule."""

    field: str
    message: str


@dataclass
class ValidationResult:
    errors: List[ValidationError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def add(self, field_name: str, message: str) -> None:
        self.errors.append(ValidationError(field_name, message))

    def field_error(self, field_name: str) -> Optional[str]:
        """Message of the first error for a field, if any."""
        for error in self.errors:
            if error.field == field_name:
                return error.message
        return None


def _number(value) -> Optional[Decimal]:
    """Coerce to Decimal, or None when the value is not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, (int, float, str)):
        try:
            number = Decimal(str(value))
        except InvalidOperation:
            return None
        return number if number.is_finite() else None
    return None


def _require_text(result: ValidationResult, data: Mapping, name: str, label: str):
    value = data.get(name)
    if not isinstance(value, str) or not value.strip():
        result.add(name, f"{label} is required")


def _require_date(result: ValidationResult, data: Mapping, name: str, label: str):
    value = data.get(name)
    if not value:
        result.add(name, f"{label} is required")
    elif not is_valid_date(value):
        result.add(name, "Invalid date format, expected YYYY-MM-DD")


def _optional_date(result: ValidationResult, data: Mapping, name: str):
    value = data.get(name)
    if value and not is_valid_date(value):
        result.add(name, "Invalid date format, expected YYYY-MM-DD")


def _require_choice(
    result: ValidationResult, data: Mapping, name: str, label: str, choices
):
    value = data.get(name)
    if not value:
        result.add(name, f"{label} is required")
    elif value not in choices:
        result.add(name, f"{label} must be one of: {', '.join(choices)}")


def _positive(result: ValidationResult, data: Mapping, name: str, label: str):
    """Required number strictly greater than zero."""
    value = data.get(name)
    if value is None:
        result.add(name, f"{label} is required")
        return
    number = _number(value)
    if number is None:
        result.add(name, f"{label} must be a number")
    elif number <= 0:
        result.add(name, f"{label} must be greater than 0")


def _non_negative(
    result: ValidationResult, data: Mapping, name: str, label: str, required=True
):
    value = data.get(name)
    if value is None:
        if required:
            result.add(name, f"{label} is required")
        return
    number = _number(value)
    if number is None:
        result.add(name, f"{label} must be a number")
    elif number < 0:
        result.add(name, f"{label} cannot be negative")


def validate_transaction(data: Mapping) -> ValidationResult:
    result = ValidationResult()
    _require_date(result, data, "date", "Date")
    _require_choice(result, data, "type", "Transaction type", TRANSACTION_TYPES)
    _positive(result, data, "amount", "Amount")
    if not data.get("category_id"):
        result.add("category_id", "Category is required")
    payment_method = data.get("payment_method")
    if payment_method and payment_method not in PAYMENT_METHODS:
        result.add(
            "payment_method",
            f"Payment method must be one of: {', '.join(PAYMENT_METHODS)}",
        )
    return result


def validate_category(
    data: Mapping, existing_names: Iterable[str] = ()
) -> ValidationResult:
    """Validate category input.

    Args:
        data: Category fields.
        existing_names: Names already in use. Compared case-insensitively
            after trimming.
    """
    result = ValidationResult()
    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        result.add("name", "Category name is required")
    else:
        taken = {n.strip().lower() for n in existing_names}
        if name.strip().lower() in taken:
            result.add("name", "Category name already exists")
    _require_choice(result, data, "type", "Category type", CATEGORY_TYPES)
    return result


def validate_subcategory(
    data: Mapping, existing_names: Iterable[str] = ()
) -> ValidationResult:
    result = ValidationResult()
    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        result.add("name", "Subcategory name is required")
    elif name.strip().lower() in {n.strip().lower() for n in existing_names}:
        result.add("name", "Subcategory name already exists")
    return result


def validate_savings_goal(data: Mapping) -> ValidationResult:
    result = ValidationResult()
    _require_text(result, data, "name", "Savings name")
    _positive(result, data, "target_amount", "Target amount")
    _optional_date(result, data, "target_date")
    return result


def validate_deposit(data: Mapping) -> ValidationResult:
    result = ValidationResult()
    _positive(result, data, "amount", "Amount")
    _optional_date(result, data, "date")
    return result


def validate_installment(data: Mapping) -> ValidationResult:
    result = ValidationResult()
    _require_text(result, data, "name", "Installment name")

    tenor = data.get("total_tenor")
    if tenor is None:
        result.add("total_tenor", "Total tenor is required")
    elif isinstance(tenor, bool) or not isinstance(tenor, int):
        result.add("total_tenor", "Total tenor must be a whole number of months")
    elif tenor <= 0:
        result.add("total_tenor", "Total tenor must be greater than 0")

    _positive(result, data, "monthly_amount", "Monthly amount")
    if data.get("total_amount") is not None:
        _positive(result, data, "total_amount", "Total amount")
    _require_date(result, data, "start_date", "Start date")
    return result


def validate_installment_payment(data: Mapping) -> ValidationResult:
    result = ValidationResult()
    _positive(result, data, "amount", "Amount")
    _optional_date(result, data, "date")
    return result


def validate_monthly_need(data: Mapping) -> ValidationResult:
    result = ValidationResult()
    _require_text(result, data, "name", "Need name")
    _positive(result, data, "budget_amount", "Budget")

    due_day = data.get("due_day")
    if due_day is not None:
        if isinstance(due_day, bool) or not isinstance(due_day, int):
            result.add("due_day", "Due day must be a whole number")
        elif not 1 <= due_day <= 31:
            result.add("due_day", "Due day must be between 1 and 31")

    period = data.get("recurrence_period")
    if period is not None and period not in RECURRENCE_PERIODS:
        result.add(
            "recurrence_period",
            f"Recurrence period must be one of: {', '.join(RECURRENCE_PERIODS)}",
        )

    start_month = data.get("start_month")
    if start_month is not None and not is_valid_year_month(start_month):
        result.add("start_month", "Invalid month format, expected YYYY-MM")
    return result


def validate_monthly_need_payment(data: Mapping) -> ValidationResult:
    result = ValidationResult()
    _non_negative(result, data, "actual_amount", "Actual amount")
    year_month = data.get("year_month")
    if year_month is not None and not is_valid_year_month(year_month):
        result.add("year_month", "Invalid month format, expected YYYY-MM")
    return result


def validate_wishlist_item(data: Mapping) -> ValidationResult:
    result = ValidationResult()
    _require_text(result, data, "name", "Item name")
    _positive(result, data, "target_price", "Target price")
    _require_choice(result, data, "priority", "Priority", PRIORITIES)
    _optional_date(result, data, "target_date")
    _non_negative(result, data, "current_saved", "Saved amount", required=False)
    status = data.get("status")
    if status is not None and status not in WISHLIST_STATUSES:
        result.add("status", f"Status must be one of: {', '.join(WISHLIST_STATUSES)}")
    return result


def validate_asset(data: Mapping) -> ValidationResult:
    result = ValidationResult()
    _require_text(result, data, "name", "Asset name")

    asset_type = data.get("type")
    allowed = LIABILITY_TYPES if data.get("is_liability") else ASSET_TYPES
    if not asset_type:
        result.add("type", "Asset type is required")
    elif asset_type not in allowed:
        result.add("type", f"Asset type must be one of: {', '.join(allowed)}")

    _non_negative(result, data, "initial_value", "Initial value")
    _non_negative(result, data, "current_value", "Current value")
    return result
