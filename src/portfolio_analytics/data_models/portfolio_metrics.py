from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from portfolio_analytics.data_models.holding import Holding


class AllocationBucket(BaseModel):
    """Aggregated value of one asset-type or sector group."""

    value: float = 0.0
    percentage: float = 0.0  # share of total portfolio value (0-100)
    count: int = 0


class BasicMetrics(BaseModel):
    """Descriptive portfolio metrics shown on the overview screen."""

    total_value: float
    total_cost: float
    total_gain_loss: float
    total_return_pct: float

    best_performer: Optional[Holding] = None
    worst_performer: Optional[Holding] = None
    # Unweighted mean of per-holding gain_loss_percent; differs from total_return_pct on purpose.
    average_return: float
    return_volatility: float

    asset_allocation: Dict[str, AllocationBucket] = Field(default_factory=dict)
    sector_allocation: Dict[str, AllocationBucket] = Field(default_factory=dict)

    concentration_risk: float
    diversification_score: float
    risk_score: float


class RiskMetrics(BaseModel):
    """Risk and risk-adjusted return metrics.

    `volatility`, `max_drawdown` and `risk_score` are on a percent scale.
    `var_95_1day` and `var_99_1day` are currency amounts in the holdings'
    source currency.
    """

    beta: float
    volatility: float
    sharpe_ratio: float
    sortino_ratio: float
    treynor_ratio: float
    var_95_1day: float
    var_99_1day: float
    max_drawdown: float
    risk_score: float


class DiversificationMetrics(BaseModel):
    """Concentration and diversification metrics.

    `hhi`, `sector_ratio` and `avg_correlation` are fractions (0-1);
    `diversification_score` is 0-100.
    """

    hhi: float
    effective_stocks: float
    sector_ratio: float
    avg_correlation: float
    diversification_score: float


class TaxLossOpportunity(Holding):
    """A losing holding with the tax saved by realizing its loss."""

    potential_tax_savings: float


class HoldingPeriodBucket(BaseModel):
    gains: float = 0.0
    losses: float = 0.0  # absolute value of accumulated losses
    count: int = 0


class GainsByHoldingPeriod(BaseModel):
    short_term: HoldingPeriodBucket = Field(default_factory=HoldingPeriodBucket)
    long_term: HoldingPeriodBucket = Field(default_factory=HoldingPeriodBucket)


class TaxOptimizationSummary(BaseModel):
    opportunities: List[TaxLossOpportunity] = Field(default_factory=list)
    total_potential_savings: float = 0.0
    gains_by_holding_period: GainsByHoldingPeriod


class DividendHolding(Holding):
    """A holding found in the dividend table with its estimated income."""

    estimated_annual_dividend: float
    dividend_yield: float  # annual yield in percent


class DividendIncomeSummary(BaseModel):
    dividend_holdings: List[DividendHolding] = Field(default_factory=list)
    dividend_holding_count: int = 0
    holding_count: int = 0
    total_annual_dividends: float = 0.0
    monthly_income: float = 0.0
    portfolio_yield: float = 0.0  # annual dividends as percent of total value


class PortfolioReport(BaseModel):
    """Combined basic, risk and diversification metrics for one portfolio.

    This is the record handed to presentation and narrative layers. Tax and
    dividend summaries are computed separately on demand.
    """

    portfolio_name: Optional[str] = None
    as_of_date: Optional[date] = None
    holding_count: int

    basic: BasicMetrics
    risk: RiskMetrics
    diversification: DiversificationMetrics
