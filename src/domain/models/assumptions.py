"""Investor assumptions and derived per-listing metrics.

Assumptions are supplied per request and never persisted server-side.
Out-of-range values are clamped, never rejected.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

from src.core.coercion import to_number

AMORTIZATION_CHOICES: tuple[int, ...] = (15, 20, 25, 30)


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


class Assumptions(BaseModel):
    """Financing and operating assumptions used to decorate listings."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    down_payment_pct: float = Field(default=20.0, description="Down payment, % of price")
    interest_rate_pct: float = Field(default=5.5, description="Annual mortgage rate %")
    amort_years: int = Field(default=30, description="Amortization in years")
    vacancy_pct: float = Field(default=5.0, description="Vacancy allowance, % of rent")
    expense_pct: float = Field(default=35.0, description="Operating expenses, % of effective rent")

    @field_validator("down_payment_pct", "vacancy_pct", "expense_pct", mode="before")
    @classmethod
    def clamp_percentage(cls, v: Any, info: ValidationInfo) -> float:
        """Clamp percentages into [0, 100]; unreadable values use the default."""
        number = to_number(v)
        if number is None:
            return cls.model_fields[info.field_name].default
        return clamp(number, 0.0, 100.0)

    @field_validator("interest_rate_pct", mode="before")
    @classmethod
    def non_negative_rate(cls, v: Any) -> float:
        number = to_number(v)
        if number is None:
            return cls.model_fields["interest_rate_pct"].default
        return max(0.0, number)

    @field_validator("amort_years", mode="before")
    @classmethod
    def snap_amortization(cls, v: Any) -> int:
        """Snap to the nearest offered amortization (ties go to the shorter term)."""
        number = to_number(v)
        if number is None:
            return cls.model_fields["amort_years"].default
        return min(AMORTIZATION_CHOICES, key=lambda years: abs(years - number))


class Metrics(BaseModel):
    """Investor metrics for one listing under one set of assumptions."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    loan_amount: float | None = None
    monthly_mortgage: float | None = None
    effective_rent_monthly: float | None = None
    opex_monthly: float | None = None
    noi_annual: float | None = None
    cash_flow_monthly: float | None = None
    cash_on_cash_pct: float | None = None
    dscr: float | None = None
