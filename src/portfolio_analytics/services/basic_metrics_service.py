"""Basic portfolio metrics.

Aggregate sums, best/worst performers, allocation breakdowns, top-N
concentration and the simple diversification and risk heuristics shown on
the overview screen. All functions are pure and accept an empty list.
"""
from __future__ import annotations

from typing import Dict, List, Optional, Sequence
import logging
import math

from portfolio_analytics.data_models.analytics_config import (
    AnalyticsConfig,
    DEFAULT_ANALYTICS_CONFIG,
)
from portfolio_analytics.data_models.holding import Holding
from portfolio_analytics.data_models.portfolio_metrics import AllocationBucket, BasicMetrics

logger = logging.getLogger(__name__)

UNKNOWN_LABEL = "Unknown"


def compute_total_value(holdings: Sequence[Holding]) -> float:
    return float(sum(h.market_value for h in holdings))


def compute_total_cost(holdings: Sequence[Holding]) -> float:
    return float(sum(h.total_cost for h in holdings))


def compute_total_gain_loss(holdings: Sequence[Holding]) -> float:
    return compute_total_value(holdings) - compute_total_cost(holdings)


def compute_total_return_pct(holdings: Sequence[Holding]) -> float:
    """Total gain/loss as a percent of total cost, 0 when the cost is 0."""
    total_cost = compute_total_cost(holdings)
    if total_cost <= 0:
        return 0.0
    return compute_total_gain_loss(holdings) / total_cost * 100.0


def get_best_performer(holdings: Sequence[Holding]) -> Optional[Holding]:
    """Holding with the highest `gain_loss_percent`; the first one wins ties."""
    if not holdings:
        return None
    return max(holdings, key=lambda h: h.gain_loss_percent)


def get_worst_performer(holdings: Sequence[Holding]) -> Optional[Holding]:
    """Holding with the lowest `gain_loss_percent`; the first one wins ties."""
    if not holdings:
        return None
    return min(holdings, key=lambda h: h.gain_loss_percent)


def compute_average_return(holdings: Sequence[Holding]) -> float:
    """Unweighted mean of per-holding `gain_loss_percent`.

    This is not value-weighted and will generally differ from
    `compute_total_return_pct`. The two answer different questions (typical
    position outcome vs. portfolio outcome) and both are reported.
    """
    if not holdings:
        return 0.0
    return float(sum(h.gain_loss_percent for h in holdings)) / len(holdings)


def compute_return_volatility(holdings: Sequence[Holding]) -> float:
    """Population standard deviation of `gain_loss_percent` across holdings."""
    if not holdings:
        return 0.0
    avg = compute_average_return(holdings)
    variance = sum((h.gain_loss_percent - avg) ** 2 for h in holdings) / len(holdings)
    return math.sqrt(variance)


def _allocate_by(holdings: Sequence[Holding], attr: str) -> Dict[str, AllocationBucket]:
    groups: Dict[str, AllocationBucket] = {}
    for h in holdings:
        label = getattr(h, attr) or UNKNOWN_LABEL
        bucket = groups.setdefault(label, AllocationBucket())
        bucket.value += h.market_value
        bucket.count += 1

    total_value = compute_total_value(holdings)
    for bucket in groups.values():
        if total_value > 0:
            bucket.percentage = bucket.value / total_value * 100.0
        else:
            bucket.percentage = 0.0
    return groups


def compute_asset_allocation(holdings: Sequence[Holding]) -> Dict[str, AllocationBucket]:
    """Group market value by `asset_type`, in first-seen order."""
    return _allocate_by(holdings, "asset_type")


def compute_sector_allocation(holdings: Sequence[Holding]) -> Dict[str, AllocationBucket]:
    """Group market value by `sector`, in first-seen order."""
    return _allocate_by(holdings, "sector")


def compute_concentration_risk(holdings: Sequence[Holding], top_n: int = 5) -> float:
    """Share of total value (0-100) held in the `top_n` largest positions.

    Positions are ranked by market value descending; equal values keep their
    input order.
    """
    if not holdings:
        return 0.0
    # fsum is order independent, so covering every position gives exactly 100.
    total_value = math.fsum(h.market_value for h in holdings)
    if total_value <= 0:
        logger.debug("Concentration risk requested for a portfolio with zero total value")
        return 0.0

    ranked: List[Holding] = sorted(holdings, key=lambda h: h.market_value, reverse=True)
    top_value = math.fsum(h.market_value for h in ranked[: max(top_n, 0)])
    return top_value / total_value * 100.0


def compute_basic_diversification_score(
    holdings: Sequence[Holding],
    *,
    config: AnalyticsConfig = DEFAULT_ANALYTICS_CONFIG,
) -> float:
    """Simple 0-100 diversification heuristic.

    Rewards the number of distinct asset types (10 points each) and sectors
    (5 points each), capped at 50, and penalises top-N concentration by half
    its value, capped at 50.
    """
    if not holdings:
        return 0.0

    asset_type_count = len(compute_asset_allocation(holdings))
    sector_count = len(compute_sector_allocation(holdings))
    concentration = compute_concentration_risk(holdings, config.concentration_top_n)

    concentration_penalty = min(concentration / 2.0, 50.0)
    diversity_bonus = min(asset_type_count * 10.0 + sector_count * 5.0, 50.0)

    return max(0.0, min(100.0, diversity_bonus + (50.0 - concentration_penalty)))


def compute_basic_risk_score(
    holdings: Sequence[Holding],
    *,
    config: AnalyticsConfig = DEFAULT_ANALYTICS_CONFIG,
) -> float:
    """Simple 0-100 risk heuristic (higher is riskier).

    Sums three capped components: return dispersion (max 50), top-N
    concentration halved (max 25) and an asset-class weight that counts
    crypto at 0.5 and individual stocks at 0.2 per percent held (max 25).
    """
    if not holdings:
        return 0.0

    volatility = compute_return_volatility(holdings)
    concentration = compute_concentration_risk(holdings, config.concentration_top_n)
    allocation = compute_asset_allocation(holdings)

    asset_risk = 0.0
    if "Crypto" in allocation:
        asset_risk += allocation["Crypto"].percentage * 0.5
    if "Stock" in allocation:
        asset_risk += allocation["Stock"].percentage * 0.2

    volatility_score = min(volatility, 50.0)
    concentration_score = min(concentration / 2.0, 25.0)
    asset_score = min(asset_risk, 25.0)

    return min(100.0, volatility_score + concentration_score + asset_score)


def compute_basic_metrics(
    holdings: Sequence[Holding],
    *,
    config: AnalyticsConfig = DEFAULT_ANALYTICS_CONFIG,
) -> BasicMetrics:
    """Bundle every basic metric for the overview screen."""
    total_value = compute_total_value(holdings)
    total_cost = compute_total_cost(holdings)
    total_gain_loss = total_value - total_cost

    return BasicMetrics(
        total_value=total_value,
        total_cost=total_cost,
        total_gain_loss=total_gain_loss,
        total_return_pct=(total_gain_loss / total_cost * 100.0) if total_cost > 0 else 0.0,
        best_performer=get_best_performer(holdings),
        worst_performer=get_worst_performer(holdings),
        average_return=compute_average_return(holdings),
        return_volatility=compute_return_volatility(holdings),
        asset_allocation=compute_asset_allocation(holdings),
        sector_allocation=compute_sector_allocation(holdings),
        concentration_risk=compute_concentration_risk(holdings, config.concentration_top_n),
        diversification_score=compute_basic_diversification_score(holdings, config=config),
        risk_score=compute_basic_risk_score(holdings, config=config),
    )
