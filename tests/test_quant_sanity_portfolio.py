"""Cross-module sanity checks on small, hand-computable portfolios."""
import pytest

from portfolio_analytics.data_models.holding import Holding
from portfolio_analytics.services.basic_metrics_service import (
    compute_asset_allocation,
    compute_concentration_risk,
    compute_total_cost,
    compute_total_gain_loss,
    compute_total_return_pct,
    compute_total_value,
)
from portfolio_analytics.services.diversification_service import (
    compute_diversification_score,
    compute_effective_stocks,
    compute_hhi,
    compute_sector_diversification_ratio,
)
from portfolio_analytics.services.metrics_aggregator_service import build_portfolio_report
from portfolio_analytics.services.risk_metrics_service import compute_portfolio_beta, compute_risk_score
from portfolio_analytics.services.tax_income_service import identify_tax_loss_opportunities


def test_single_apple_holding_is_fully_concentrated():
    holding = Holding(
        symbol="AAPL",
        quantity=10,
        cost_basis=80.0,
        current_price=100.0,
        market_value=1000.0,
        total_cost=800.0,
        gain_loss_percent=25.0,
    )
    holdings = [holding]

    assert compute_concentration_risk(holdings, 5) == pytest.approx(100.0)
    assert compute_hhi(holdings) == pytest.approx(1.0)
    assert compute_effective_stocks(holdings) == pytest.approx(1.0)


def test_two_profitable_equal_holdings_in_two_sectors():
    holdings = [
        Holding(symbol="AAPL", quantity=10, cost_basis=40.0, current_price=50.0, sector="Technology"),
        Holding(symbol="JPM", quantity=5, cost_basis=80.0, current_price=100.0, sector="Financial"),
    ]

    assert compute_sector_diversification_ratio(holdings) == pytest.approx(1.0)
    assert compute_hhi(holdings) == pytest.approx(0.5)
    assert compute_effective_stocks(holdings) == pytest.approx(2.0)


def test_zero_cost_portfolio_has_finite_zero_return():
    holdings = [
        Holding(symbol="GIFT", quantity=10, cost_basis=0.0, current_price=5.0),
        Holding(symbol="AIRDROP", quantity=100, cost_basis=0.0, current_price=0.1, asset_type="Crypto"),
    ]

    assert compute_total_return_pct(holdings) == 0.0
    report = build_portfolio_report(holdings)
    assert report.basic.total_return_pct == 0.0
    assert report.risk.sharpe_ratio == report.risk.sharpe_ratio  # not NaN


def test_single_loss_tax_saving():
    holdings = [Holding(symbol="DIS", quantity=10, cost_basis=195.0, current_price=95.0)]

    opportunities = identify_tax_loss_opportunities(holdings)
    assert len(opportunities) == 1
    assert opportunities[0].potential_tax_savings == pytest.approx(250.0)


def test_empty_portfolio_scores():
    assert compute_diversification_score([]) == 0.0
    assert compute_risk_score([]) == 0.0
    assert compute_portfolio_beta([]) == 1.0


@pytest.mark.parametrize(
    "values",
    [
        [100.0],
        [100.0, 100.0],
        [900.0, 50.0, 30.0, 20.0],
        [1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0],
    ],
)
def test_invariants_across_value_profiles(values):
    holdings = [
        Holding(
            symbol=f"S{i}",
            quantity=1,
            cost_basis=v * 0.9,
            current_price=v,
            sector=f"Sector{i % 3}",
            asset_type="ETF" if i % 2 else "Stock",
        )
        for i, v in enumerate(values)
    ]

    assert compute_total_gain_loss(holdings) == compute_total_value(holdings) - compute_total_cost(holdings)
    assert sum(b.percentage for b in compute_asset_allocation(holdings).values()) == pytest.approx(100.0)

    hhi = compute_hhi(holdings)
    assert 0.0 < hhi <= 1.0 + 1e-12
    assert compute_effective_stocks(holdings) == pytest.approx(1.0 / hhi)
    assert compute_effective_stocks(holdings) <= len(holdings) + 1e-9

    previous = 0.0
    for top_n in range(1, len(holdings) + 2):
        current = compute_concentration_risk(holdings, top_n)
        assert current >= previous - 1e-9
        previous = current
    assert compute_concentration_risk(holdings, len(holdings)) == 100.0
