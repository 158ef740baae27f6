"""Compose basic, risk and diversification metrics into one report."""
from __future__ import annotations

from typing import Sequence, Union
import logging

from portfolio_analytics.data_models.analytics_config import (
    AnalyticsConfig,
    DEFAULT_ANALYTICS_CONFIG,
)
from portfolio_analytics.data_models.holding import Holding, PortfolioSnapshot
from portfolio_analytics.data_models.portfolio_metrics import PortfolioReport
from portfolio_analytics.services.basic_metrics_service import compute_basic_metrics
from portfolio_analytics.services.diversification_service import (
    compute_comprehensive_diversification_metrics,
)
from portfolio_analytics.services.risk_metrics_service import compute_comprehensive_risk_metrics

logger = logging.getLogger(__name__)


def build_portfolio_report(
    portfolio: Union[PortfolioSnapshot, Sequence[Holding]],
    *,
    config: AnalyticsConfig = DEFAULT_ANALYTICS_CONFIG,
) -> PortfolioReport:
    """Build a PortfolioReport for a snapshot or a bare list of holdings.

    Sub-results are passed through untouched; the report only selects and
    groups fields. Tax and dividend summaries are not included.
    """
    if isinstance(portfolio, PortfolioSnapshot):
        holdings = list(portfolio.holdings)
        portfolio_name = portfolio.name
        as_of_date = portfolio.as_of_date
    else:
        holdings = list(portfolio)
        portfolio_name = None
        as_of_date = None

    report = PortfolioReport(
        portfolio_name=portfolio_name,
        as_of_date=as_of_date,
        holding_count=len(holdings),
        basic=compute_basic_metrics(holdings, config=config),
        risk=compute_comprehensive_risk_metrics(holdings, config=config),
        diversification=compute_comprehensive_diversification_metrics(holdings),
    )

    logger.info(
        "Built portfolio report for %s with %d holdings (total value %.2f)",
        portfolio_name or "<unnamed portfolio>",
        report.holding_count,
        report.basic.total_value,
    )
    return report
