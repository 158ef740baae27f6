"""Advanced diversification metrics.

Herfindahl-Hirschman concentration, effective number of positions, sector
spread and a composite 0-100 diversification score.
"""
from __future__ import annotations

from collections import Counter
from typing import Optional, Sequence
import logging

import numpy as np

from portfolio_analytics.data_models.holding import Holding
from portfolio_analytics.data_models.portfolio_metrics import DiversificationMetrics
from portfolio_analytics.services.basic_metrics_service import UNKNOWN_LABEL, compute_total_value

logger = logging.getLogger(__name__)

# Average-correlation proxy bounds: base level plus the share scaled by the
# largest sector's weight in the holding count.
CORRELATION_BASE = 0.3
CORRELATION_SECTOR_SPAN = 0.4

SECTOR_BONUS_POINTS = 20.0
CORRELATION_PENALTY_POINTS = 20.0


def _sector_of(h: Holding) -> str:
    return h.sector or UNKNOWN_LABEL


def compute_hhi(holdings: Sequence[Holding]) -> float:
    """Sum of squared value weights, in (0, 1].

    Returns 1.0 (fully concentrated) for an empty portfolio or one with zero
    total value.
    """
    if not holdings:
        return 1.0
    total_value = compute_total_value(holdings)
    if total_value <= 0:
        logger.debug("Zero total value; HHI defaults to 1.0")
        return 1.0

    weights = np.array([h.market_value for h in holdings], dtype=float) / total_value
    return float(np.sum(weights ** 2))


def compute_effective_stocks(holdings: Sequence[Holding], hhi: Optional[float] = None) -> float:
    """Effective number of equally weighted positions, 1 / HHI."""
    if hhi is None:
        hhi = compute_hhi(holdings)
    return 1.0 / hhi if hhi > 0 else 0.0


def compute_sector_diversification_ratio(holdings: Sequence[Holding]) -> float:
    """Distinct sectors divided by number of holdings."""
    if not holdings:
        return 0.0
    return len({_sector_of(h) for h in holdings}) / len(holdings)


def compute_average_correlation_proxy(holdings: Sequence[Holding]) -> float:
    """Estimated average pairwise correlation in [0.3, 0.7].

    0.3 + 0.4 * (largest sector count / holding count). Holdings crowded
    into one sector are assumed to move together. No return series is used.
    """
    if not holdings:
        return CORRELATION_BASE
    sector_counts = Counter(_sector_of(h) for h in holdings)
    sector_concentration = max(sector_counts.values()) / len(holdings)
    return CORRELATION_BASE + sector_concentration * CORRELATION_SECTOR_SPAN


def compute_diversification_score(
    holdings: Sequence[Holding],
    *,
    hhi: Optional[float] = None,
    avg_correlation: Optional[float] = None,
) -> float:
    """Composite 0-100 diversification score.

    Steps:
    1. Normalise HHI against the perfectly diversified value 1/n:
       100 * (1 - (HHI - 1/n) / (1 - 1/n)). A single holding scores 0 here.
    2. Add a sector bonus of unique_sectors / n * 20.
    3. Subtract a correlation penalty of avg_correlation * 20.
    4. Clamp to [0, 100].
    """
    if not holdings:
        return 0.0

    n = len(holdings)
    if hhi is None:
        hhi = compute_hhi(holdings)
    if avg_correlation is None:
        avg_correlation = compute_average_correlation_proxy(holdings)

    perfect = 1.0 / n
    if n > 1:
        hhi_normalized = 100.0 * (1.0 - (hhi - perfect) / (1.0 - perfect))
    else:
        hhi_normalized = 0.0

    unique_sectors = len({_sector_of(h) for h in holdings})
    sector_bonus = unique_sectors / n * SECTOR_BONUS_POINTS
    correlation_penalty = avg_correlation * CORRELATION_PENALTY_POINTS

    score = hhi_normalized + sector_bonus - correlation_penalty
    return max(0.0, min(100.0, score))


def compute_comprehensive_diversification_metrics(holdings: Sequence[Holding]) -> DiversificationMetrics:
    hhi = compute_hhi(holdings)
    avg_correlation = compute_average_correlation_proxy(holdings)

    return DiversificationMetrics(
        hhi=hhi,
        effective_stocks=compute_effective_stocks(holdings, hhi=hhi),
        sector_ratio=compute_sector_diversification_ratio(holdings),
        avg_correlation=avg_correlation,
        diversification_score=compute_diversification_score(
            holdings, hhi=hhi, avg_correlation=avg_correlation
        ),
    )
