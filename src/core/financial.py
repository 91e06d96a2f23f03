"""Financial calculation functions.

Fixed-rate, fully-amortizing mortgage math and the per-listing investor
metrics built on it. Rates are percentages (5.5 means 5.5 %).
"""

from __future__ import annotations

import numpy_financial as npf

from src.domain.models.assumptions import Assumptions, Metrics, clamp


def mortgage_payment_monthly(
    principal: float,
    annual_rate_pct: float,
    amort_years: float,
) -> float:
    """Calculate the monthly principal + interest payment.

    payment = P * r(1+r)^n / ((1+r)^n - 1), with r the monthly rate and n the
    number of monthly payments; P / n when the rate is zero.

    Args:
        principal: Loan amount
        annual_rate_pct: Annual interest rate as percentage
        amort_years: Amortization period in years

    Returns:
        Monthly payment, 0.0 for an empty loan or term
    """
    n_months = int(round(amort_years * 12))
    if principal <= 0 or n_months <= 0:
        return 0.0

    monthly_rate = (annual_rate_pct / 100.0) / 12.0

    if monthly_rate <= 0:
        return principal / n_months

    return float(-npf.pmt(monthly_rate, n_months, principal))


def compute_metrics(
    price: float | None,
    est_rent_monthly: float | None,
    listing_noi_annual: float | None,
    assumptions: Assumptions,
) -> Metrics:
    """Compute investor metrics for one listing.

    Null propagation:
    - no usable price: everything is None except the listing's own NOI
    - no usable rent: loan and mortgage only (plus the listing's own NOI)

    Args:
        price: Purchase price
        est_rent_monthly: Monthly rent (file-provided or estimated)
        listing_noi_annual: NOI carried by the listing, passed through when
            rent-based NOI cannot be computed
        assumptions: Financing and operating assumptions

    Returns:
        Metrics with None for anything that cannot be computed
    """
    if not price or price <= 0:
        return Metrics(noi_annual=listing_noi_annual)

    down = clamp(assumptions.down_payment_pct, 0.0, 100.0) / 100.0
    loan_amount = price * (1.0 - down)
    monthly_mortgage = mortgage_payment_monthly(
        loan_amount,
        assumptions.interest_rate_pct,
        assumptions.amort_years,
    )

    if not est_rent_monthly or est_rent_monthly <= 0:
        return Metrics(
            loan_amount=loan_amount,
            monthly_mortgage=monthly_mortgage,
            noi_annual=listing_noi_annual,
        )

    vacancy = clamp(assumptions.vacancy_pct, 0.0, 100.0) / 100.0
    expense = clamp(assumptions.expense_pct, 0.0, 100.0) / 100.0

    effective_rent = est_rent_monthly * (1.0 - vacancy)
    opex = effective_rent * expense
    net_monthly = effective_rent - opex
    cash_flow = net_monthly - monthly_mortgage

    cash_invested = price * down
    cash_on_cash = (cash_flow * 12.0) / cash_invested * 100.0 if cash_invested > 0 else None
    dscr = net_monthly / monthly_mortgage if monthly_mortgage > 0 else None

    return Metrics(
        loan_amount=loan_amount,
        monthly_mortgage=monthly_mortgage,
        effective_rent_monthly=effective_rent,
        opex_monthly=opex,
        noi_annual=net_monthly * 12.0,
        cash_flow_monthly=cash_flow,
        cash_on_cash_pct=cash_on_cash,
        dscr=dscr,
    )


def operating_noi(
    purchase_price: float | None,
    monthly_rent: float | None,
    annual_tax: float | None = None,
    annual_insurance: float | None = None,
    maint_pct: float = 1.0,
    vacancy_pct: float = 5.0,
    mgmt_pct: float = 8.0,
) -> tuple[float | None, float | None]:
    """Itemized NOI and cap rate, operating only (no debt service).

    Property tax defaults to 1.2 % of the price and insurance to 1,200 / yr
    when not supplied. Maintenance is a % of price; vacancy and management
    are % of gross rent.

    Returns:
        Tuple of (annual NOI, cap rate %), both None without price or rent
    """
    if not purchase_price or not monthly_rent:
        return None, None

    gross_annual = monthly_rent * 12.0
    tax = annual_tax if annual_tax is not None else purchase_price * 0.012
    insurance = annual_insurance if annual_insurance is not None else 1200.0
    maintenance = purchase_price * (maint_pct / 100.0)
    vacancy = gross_annual * (vacancy_pct / 100.0)
    management = gross_annual * (mgmt_pct / 100.0)

    noi = gross_annual - (tax + insurance + maintenance + vacancy + management)
    return noi, (noi / purchase_price) * 100.0


def quick_roi(purchase_price: float | None, monthly_rent: float | None) -> dict[str, float | bool | None]:
    """Back-of-envelope screen: gross yield and the 1 % rule."""
    if not purchase_price or purchase_price <= 0 or not monthly_rent:
        return {"gross_yield_pct": None, "rent_to_price_pct": None, "meets_one_percent_rule": False}

    rent_to_price = monthly_rent / purchase_price * 100.0
    return {
        "gross_yield_pct": monthly_rent * 12.0 / purchase_price * 100.0,
        "rent_to_price_pct": rent_to_price,
        "meets_one_percent_rule": rent_to_price >= 1.0,
    }
