import os
from dataclasses import dataclass, field
from datetime import date

from easyleave.core.types import LeaveCategory

DEFAULTS = {
    "DATABASE_URL": "sqlite:///easyleave.db",
    "SECRET_KEY": "dev-secret",
    "TOKEN_TTL_MIN": "120",
    "LOG_LEVEL": "INFO",
    "ANNUAL_ACCRUAL_RATE": "1.75",
    "PATERNITY_QUOTA": "30",
    "MATERNITY_QUOTA": "90",
    "PUBLIC_HOLIDAYS": "",
    "HR_REVIEW_CATEGORIES": "Circumstance",
    "REQUIRE_MATERNITY_DOCUMENT": "true",
}


def _split(value) -> list[str]:
    if isinstance(value, (list, tuple, set, frozenset)):
        return [str(v).strip() for v in value if str(v).strip()]
    return [part.strip() for part in str(value or "").split(",") if part.strip()]


def _as_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def parse_holidays(value) -> frozenset[date]:
    items = value if isinstance(value, (set, frozenset)) else _split(value)
    holidays = set()
    for item in items:
        holidays.add(item if isinstance(item, date) else date.fromisoformat(item))
    return frozenset(holidays)


def parse_categories(value) -> frozenset[LeaveCategory]:
    return frozenset(LeaveCategory(v) for v in _split(value))


def load_settings(overrides: dict | None = None) -> dict:
    """env settings (after load_dotenv) with the given overrides on top"""
    settings = {key: os.getenv(key, default) for key, default in DEFAULTS.items()}
    settings.update(overrides or {})
    return settings


@dataclass(frozen=True)
class LeavePolicy:
    annual_accrual_rate: float = 1.75
    yearly_quotas: dict = field(default_factory=lambda: {
        LeaveCategory.PATERNITY: 30,
        LeaveCategory.MATERNITY: 90,
    })
    holidays: frozenset = frozenset()
    hr_review_categories: frozenset = frozenset({LeaveCategory.CIRCUMSTANCE})
    require_maternity_document: bool = True

    @classmethod
    def from_config(cls, config) -> "LeavePolicy":
        return cls(
            annual_accrual_rate=float(config.get("ANNUAL_ACCRUAL_RATE", 1.75)),
            yearly_quotas={
                LeaveCategory.PATERNITY: int(config.get("PATERNITY_QUOTA", 30)),
                LeaveCategory.MATERNITY: int(config.get("MATERNITY_QUOTA", 90)),
            },
            holidays=parse_holidays(config.get("PUBLIC_HOLIDAYS", "")),
            hr_review_categories=parse_categories(
                config.get("HR_REVIEW_CATEGORIES", "Circumstance")
            ),
            require_maternity_document=_as_bool(
                config.get("REQUIRE_MATERNITY_DOCUMENT", True)
            ),
        )
