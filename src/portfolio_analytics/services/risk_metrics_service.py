"""Advanced risk metrics.

Beta, volatility, risk-adjusted return ratios, Value-at-Risk, drawdown and a
composite risk score for a single portfolio snapshot.

There is no price history here, so several figures are snapshot proxies:

- volatility is the weighted dispersion of each holding's cumulative return
  around the unweighted mean, combined with a constant pairwise correlation;
- max drawdown is the share of value currently lost on losing positions;
- betas come from the static table in `AnalyticsConfig`.

The proxies feed each other (Sharpe and VaR scale with the volatility
proxy), so their formulas must stay exactly as written.
"""
from __future__ import annotations

from typing import Optional, Sequence
import logging
import math

import numpy as np

from portfolio_analytics.data_models.analytics_config import (
    AnalyticsConfig,
    DEFAULT_ANALYTICS_CONFIG,
)
from portfolio_analytics.data_models.holding import Holding
from portfolio_analytics.data_models.portfolio_metrics import RiskMetrics
from portfolio_analytics.services.basic_metrics_service import (
    compute_total_cost,
    compute_total_value,
)

logger = logging.getLogger(__name__)

# Returned by the Sortino ratio when no holding is losing and the portfolio
# beats the risk-free rate.
SORTINO_NO_DOWNSIDE_SENTINEL = 999.0


def compute_portfolio_return_fraction(holdings: Sequence[Holding]) -> float:
    """Portfolio return as a fraction of cost (0.25 == 25%), 0 when cost is 0."""
    total_cost = compute_total_cost(holdings)
    if total_cost <= 0:
        return 0.0
    return (compute_total_value(holdings) - total_cost) / total_cost


def compute_portfolio_beta(
    holdings: Sequence[Holding],
    *,
    config: AnalyticsConfig = DEFAULT_ANALYTICS_CONFIG,
) -> float:
    """Value-weighted beta, sum(w_i * beta_i). Market beta (1.0) when empty."""
    if not holdings:
        return 1.0
    total_value = compute_total_value(holdings)
    if total_value <= 0:
        logger.debug("Zero total value; returning market beta")
        return 1.0

    return float(sum((h.market_value / total_value) * config.beta_for(h.symbol) for h in holdings))


def compute_portfolio_volatility(
    holdings: Sequence[Holding],
    *,
    config: AnalyticsConfig = DEFAULT_ANALYTICS_CONFIG,
) -> float:
    """Volatility proxy on a percent scale.

    variance = sum_i sum_j w_i * w_j * d_i * d_j * rho_ij

    where w is the value weight, d_i = |r_i - mean(r)| with r the holding's
    `gain_loss_percent`, rho_ii = 1 and rho_ij is the configured constant
    pairwise correlation. Returns sqrt(variance).
    """
    if not holdings:
        return 0.0
    total_value = compute_total_value(holdings)
    if total_value <= 0:
        logger.debug("Zero total value; volatility proxy is 0")
        return 0.0

    weights = np.array([h.market_value for h in holdings], dtype=float) / total_value
    returns = np.array([h.gain_loss_percent for h in holdings], dtype=float)
    deviations = np.abs(returns - returns.mean())

    n = len(holdings)
    correlation = np.full((n, n), config.assumed_pairwise_correlation, dtype=float)
    np.fill_diagonal(correlation, 1.0)

    x = weights * deviations
    variance = float(x @ correlation @ x)
    return math.sqrt(max(variance, 0.0))


def compute_sharpe_ratio(
    holdings: Sequence[Holding],
    *,
    volatility: Optional[float] = None,
    config: AnalyticsConfig = DEFAULT_ANALYTICS_CONFIG,
) -> float:
    """(return - risk_free) / (volatility / 100). 0 when volatility is 0.

    A precomputed `volatility` may be passed to avoid recomputing the
    O(n^2) proxy.
    """
    if not holdings:
        return 0.0
    if volatility is None:
        volatility = compute_portfolio_volatility(holdings, config=config)
    if volatility == 0:
        return 0.0

    excess = compute_portfolio_return_fraction(holdings) - config.risk_free_rate
    return excess / (volatility / 100.0)


def compute_sortino_ratio(
    holdings: Sequence[Holding],
    *,
    config: AnalyticsConfig = DEFAULT_ANALYTICS_CONFIG,
) -> float:
    """Sharpe-like ratio using downside deviation.

    Downside deviation is the root mean square of `gain_loss_percent` over
    losing holdings only. With no losing holdings the ratio is the 999
    sentinel if the portfolio return exceeds the risk-free rate, else 0.
    """
    if not holdings:
        return 0.0

    portfolio_return = compute_portfolio_return_fraction(holdings)
    negative_returns = [h.gain_loss_percent for h in holdings if h.gain_loss_percent < 0]
    if not negative_returns:
        return SORTINO_NO_DOWNSIDE_SENTINEL if portfolio_return > config.risk_free_rate else 0.0

    downside_deviation = math.sqrt(sum(r * r for r in negative_returns) / len(negative_returns))
    if downside_deviation == 0:
        return 0.0

    return (portfolio_return - config.risk_free_rate) / (downside_deviation / 100.0)


def compute_treynor_ratio(
    holdings: Sequence[Holding],
    *,
    beta: Optional[float] = None,
    config: AnalyticsConfig = DEFAULT_ANALYTICS_CONFIG,
) -> float:
    """(return - risk_free) / beta. 0 when beta is 0."""
    if not holdings:
        return 0.0
    if beta is None:
        beta = compute_portfolio_beta(holdings, config=config)
    if beta == 0:
        return 0.0

    return (compute_portfolio_return_fraction(holdings) - config.risk_free_rate) / beta


def compute_value_at_risk(
    holdings: Sequence[Holding],
    days: int = 1,
    confidence: float = 0.95,
    *,
    volatility: Optional[float] = None,
    config: AnalyticsConfig = DEFAULT_ANALYTICS_CONFIG,
) -> float:
    """Parametric VaR in currency units.

    VaR = z(confidence) * (daily_vol / 100) * total_value * sqrt(days), with
    daily_vol = volatility / sqrt(trading_days_per_year). Confidence levels
    missing from the z-score table use the default z of 1.645.
    """
    if volatility is None:
        volatility = compute_portfolio_volatility(holdings, config=config)
    total_value = compute_total_value(holdings)

    z_score = config.z_score_for(confidence)
    daily_volatility = volatility / math.sqrt(config.trading_days_per_year)
    return z_score * (daily_volatility / 100.0) * total_value * math.sqrt(days)


def compute_max_drawdown_proxy(holdings: Sequence[Holding]) -> float:
    """Unrealized losses as a percent of the value before those losses.

    losses / (total_value + losses) * 100, summed over losing holdings. This
    is a single-snapshot stand-in, not a peak-to-trough drawdown.
    """
    losing = [h for h in holdings if h.gain_loss < 0]
    if not losing:
        return 0.0

    total_value = compute_total_value(holdings)
    total_losses = sum(abs(h.gain_loss) for h in losing)
    denominator = total_value + total_losses
    if denominator <= 0:
        return 0.0
    return total_losses / denominator * 100.0


def compute_risk_score(
    holdings: Sequence[Holding],
    *,
    beta: Optional[float] = None,
    volatility: Optional[float] = None,
    config: AnalyticsConfig = DEFAULT_ANALYTICS_CONFIG,
) -> float:
    """0-100 risk score: beta scaled against 2.0 and volatility against 50%,
    each worth up to 50 points."""
    if not holdings:
        return 0.0
    if beta is None:
        beta = compute_portfolio_beta(holdings, config=config)
    if volatility is None:
        volatility = compute_portfolio_volatility(holdings, config=config)

    beta_score = min((beta / 2.0) * 50.0, 50.0)
    volatility_score = min((volatility / 50.0) * 50.0, 50.0)
    return min(100.0, beta_score + volatility_score)


def compute_comprehensive_risk_metrics(
    holdings: Sequence[Holding],
    *,
    config: AnalyticsConfig = DEFAULT_ANALYTICS_CONFIG,
) -> RiskMetrics:
    """All risk metrics for one snapshot, with beta and volatility computed once."""
    beta = compute_portfolio_beta(holdings, config=config)
    volatility = compute_portfolio_volatility(holdings, config=config)

    metrics = RiskMetrics(
        beta=beta,
        volatility=volatility,
        sharpe_ratio=compute_sharpe_ratio(holdings, volatility=volatility, config=config),
        sortino_ratio=compute_sortino_ratio(holdings, config=config),
        treynor_ratio=compute_treynor_ratio(holdings, beta=beta, config=config),
        var_95_1day=compute_value_at_risk(holdings, 1, 0.95, volatility=volatility, config=config),
        var_99_1day=compute_value_at_risk(holdings, 1, 0.99, volatility=volatility, config=config),
        max_drawdown=compute_max_drawdown_proxy(holdings),
        risk_score=compute_risk_score(holdings, beta=beta, volatility=volatility, config=config),
    )
    logger.debug(
        "Risk metrics for %d holdings: beta=%.3f volatility=%.3f score=%.1f",
        len(holdings),
        metrics.beta,
        metrics.volatility,
        metrics.risk_score,
    )
    return metrics
