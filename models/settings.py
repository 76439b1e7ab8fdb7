from dataclasses import dataclass
from decimal import Decimal

from models.fields import money_to_json, to_money

CURRENT_SCHEMA_VERSION = 1


@dataclass(frozen=True)
class AppSettings:
    """Process-wide user settings. There is exactly one settings record."""

    currency: str = "IDR"
    monthly_living_cost: Decimal = Decimal("5000000")
    emergency_fund_multiplier: int = 6
    dark_mode: bool = False
    schema_version: int = CURRENT_SCHEMA_VERSION

    def to_dict(self) -> dict:
        return {
            "currency": self.currency,
            "monthlyLivingCost": money_to_json(self.monthly_living_cost),
            "emergencyFundMultiplier": self.emergency_fund_multiplier,
            "darkMode": self.dark_mode,
            "schemaVersion": self.schema_version,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AppSettings":
        defaults = cls()
        return cls(
            currency=data.get("currency", defaults.currency),
            monthly_living_cost=to_money(
                data.get("monthlyLivingCost", defaults.monthly_living_cost)
            ),
            emergency_fund_multiplier=int(
                data.get("emergencyFundMultiplier", defaults.emergency_fund_multiplier)
            ),
            dark_mode=bool(data.get("darkMode", defaults.dark_mode)),
            schema_version=int(data.get("schemaVersion", defaults.schema_version)),
        )
