"""Tax-loss harvesting, holding-period gains and dividend income estimates.

Tax figures use a single flat assumed rate and a one-calendar-year
long-term threshold. They are planning estimates, not tax computations.
"""
from __future__ import annotations

from datetime import date
from typing import List, Optional, Sequence
import logging

from portfolio_analytics.data_models.analytics_config import (
    AnalyticsConfig,
    DEFAULT_ANALYTICS_CONFIG,
)
from portfolio_analytics.data_models.holding import Holding
from portfolio_analytics.data_models.portfolio_metrics import (
    DividendHolding,
    DividendIncomeSummary,
    GainsByHoldingPeriod,
    HoldingPeriodBucket,
    TaxLossOpportunity,
    TaxOptimizationSummary,
)
from portfolio_analytics.services.basic_metrics_service import compute_total_value

logger = logging.getLogger(__name__)


def _one_year_before(reference_date: date) -> date:
    try:
        return reference_date.replace(year=reference_date.year - 1)
    except ValueError:
        # Feb 29 has no counterpart in the prior year; roll forward to Mar 1.
        return date(reference_date.year - 1, 3, 1)


def _holding_fields(h: Holding) -> dict:
    return h.model_dump(include=set(Holding.model_fields))


def identify_tax_loss_opportunities(
    holdings: Sequence[Holding],
    *,
    config: AnalyticsConfig = DEFAULT_ANALYTICS_CONFIG,
) -> List[TaxLossOpportunity]:
    """Losing holdings, largest loss first, each with its potential tax saving.

    potential_tax_savings = |gain_loss| * assumed_tax_rate
    """
    opportunities = [
        TaxLossOpportunity(
            **_holding_fields(h),
            potential_tax_savings=abs(h.gain_loss) * config.assumed_tax_rate,
        )
        for h in holdings
        if h.gain_loss < 0
    ]
    opportunities.sort(key=lambda o: o.gain_loss)
    return opportunities


def compute_gains_by_holding_period(
    holdings: Sequence[Holding],
    reference_date: Optional[date] = None,
) -> GainsByHoldingPeriod:
    """Split gains and losses into short-term and long-term buckets.

    A holding is long-term when bought strictly before the date one year
    prior to `reference_date` (default: today). A holding bought exactly one
    year earlier, or with no purchase date, is short-term. Positive
    `gain_loss` accumulates into `gains`; anything else adds its absolute
    value to `losses`.
    """
    if reference_date is None:
        reference_date = date.today()
    one_year_ago = _one_year_before(reference_date)

    result = GainsByHoldingPeriod()
    for h in holdings:
        is_long_term = h.purchase_date is not None and h.purchase_date < one_year_ago
        bucket: HoldingPeriodBucket = result.long_term if is_long_term else result.short_term

        bucket.count += 1
        if h.gain_loss > 0:
            bucket.gains += h.gain_loss
        else:
            bucket.losses += abs(h.gain_loss)

    return result


def identify_dividend_holdings(
    holdings: Sequence[Holding],
    *,
    config: AnalyticsConfig = DEFAULT_ANALYTICS_CONFIG,
) -> List[DividendHolding]:
    """Holdings listed in the dividend table, with estimated annual income.

    estimated_annual_dividend = yield / 100 * current_price * quantity.
    Holdings without a table entry are left out rather than reported at zero.
    """
    result: List[DividendHolding] = []
    for h in holdings:
        rate = config.dividend_yields.get(h.symbol)
        if not rate:
            continue
        result.append(
            DividendHolding(
                **_holding_fields(h),
                estimated_annual_dividend=(rate / 100.0) * h.current_price * h.quantity,
                dividend_yield=rate,
            )
        )
    return result


def compute_tax_optimization_summary(
    holdings: Sequence[Holding],
    reference_date: Optional[date] = None,
    *,
    config: AnalyticsConfig = DEFAULT_ANALYTICS_CONFIG,
) -> TaxOptimizationSummary:
    opportunities = identify_tax_loss_opportunities(holdings, config=config)
    return TaxOptimizationSummary(
        opportunities=opportunities,
        total_potential_savings=float(sum(o.potential_tax_savings for o in opportunities)),
        gains_by_holding_period=compute_gains_by_holding_period(holdings, reference_date),
    )


def compute_dividend_income_summary(
    holdings: Sequence[Holding],
    *,
    config: AnalyticsConfig = DEFAULT_ANALYTICS_CONFIG,
) -> DividendIncomeSummary:
    """Estimated dividend income and yield on total portfolio value."""
    dividend_holdings = identify_dividend_holdings(holdings, config=config)
    total_annual = float(sum(d.estimated_annual_dividend for d in dividend_holdings))
    total_value = compute_total_value(holdings)

    summary = DividendIncomeSummary(
        dividend_holdings=dividend_holdings,
        dividend_holding_count=len(dividend_holdings),
        holding_count=len(holdings),
        total_annual_dividends=total_annual,
        monthly_income=total_annual / 12.0,
        portfolio_yield=(total_annual / total_value * 100.0) if total_value > 0 else 0.0,
    )
    logger.debug(
        "%d of %d holdings pay dividends; estimated annual income %.2f",
        summary.dividend_holding_count,
        summary.holding_count,
        total_annual,
    )
    return summary
