"""Reference data and constants used by the analytics services.

The tables here are estimates standing in for a market-data feed. They are
held in a frozen model so a caller can substitute real figures by building a
new config (``DEFAULT_ANALYTICS_CONFIG.model_copy(update={...})``) and
passing it to the service functions.
"""
from __future__ import annotations

from typing import Dict, List, Tuple

from pydantic import BaseModel, ConfigDict, Field


# Estimated betas by symbol. Tech names run high, staples and healthcare
# run low, broad-market ETFs sit at the market beta.
ESTIMATED_BETAS: Dict[str, float] = {
    # Technology
    "AAPL": 1.2,
    "MSFT": 1.1,
    "GOOGL": 1.05,
    "AMZN": 1.3,
    "META": 1.25,
    "NVDA": 1.6,
    "TSLA": 2.0,
    "AMD": 1.7,
    "NFLX": 1.3,
    # Defensive
    "JNJ": 0.7,
    "PG": 0.6,
    "KO": 0.6,
    "WMT": 0.7,
    "PFE": 0.8,
    # Financials
    "JPM": 1.15,
    "BAC": 1.25,
    "GS": 1.3,
    "V": 1.0,
    "MA": 1.0,
    # Energy
    "XOM": 1.1,
    "CVX": 1.05,
    # Broad-market ETFs
    "SPY": 1.0,
    "VOO": 1.0,
    "VTI": 1.0,
    "QQQ": 1.1,
}

# Annual dividend yield in percent, by symbol.
DIVIDEND_YIELDS: Dict[str, float] = {
    "AAPL": 0.24,
    "MSFT": 0.68,
    "JNJ": 1.13,
    "JPM": 1.00,
    "VOO": 1.38,
    "VTI": 1.27,
    "KO": 1.76,
    "PG": 0.94,
    "T": 1.11,
    "VZ": 0.64,
    "XOM": 3.52,
    "CVX": 3.48,
}

# One-sided z-scores keyed by confidence level.
Z_SCORES: Dict[float, float] = {
    0.90: 1.282,
    0.95: 1.645,
    0.99: 2.326,
}

# Exact symbol -> sector matches for NSE listings.
SECTOR_SYMBOL_MAP: Dict[str, str] = {
    "TCS": "Information Technology",
    "INFY": "Information Technology",
    "WIPRO": "Information Technology",
    "HCLTECH": "Information Technology",
    "TECHM": "Information Technology",
    "KPIT": "Information Technology",
    "HDFCBANK": "Financial Services",
    "ICICIBANK": "Financial Services",
    "SBIN": "Financial Services",
    "AXISBANK": "Financial Services",
    "KOTAKBANK": "Financial Services",
    "BAJFINANCE": "Financial Services",
    "CDSL": "Financial Services",
    "CAMS": "Financial Services",
    "SUNPHARMA": "Pharmaceuticals",
    "DRREDDY": "Pharmaceuticals",
    "CIPLA": "Pharmaceuticals",
    "DIVISLAB": "Pharmaceuticals",
    "ERIS": "Pharmaceuticals",
    "FORTIS": "Healthcare",
    "APOLLOHOSP": "Healthcare",
    "KIMS": "Healthcare",
    "MARUTI": "Automobile",
    "TATAMOTORS": "Automobile",
    "M&M": "Automobile",
    "BAJAJ-AUTO": "Automobile",
    "EICHERMOT": "Automobile",
    "GABRIEL": "Auto Components",
    "RELIANCE": "Energy",
    "ONGC": "Energy",
    "BPCL": "Energy",
    "IOC": "Energy",
    "POWERGRID": "Energy",
    "KPIGREEN": "Renewable Energy",
    "HINDUNILVR": "FMCG",
    "ITC": "FMCG",
    "NESTLEIND": "FMCG",
    "BRITANNIA": "FMCG",
    "LT": "Infrastructure",
    "ULTRACEMCO": "Infrastructure",
    "GRASIM": "Infrastructure",
    "BHEL": "Infrastructure",
    "TATASTEEL": "Metals & Mining",
    "HINDALCO": "Metals & Mining",
    "JSWSTEEL": "Metals & Mining",
    "VEDL": "Metals & Mining",
    "BHARTIARTL": "Telecommunications",
    "IDEA": "Telecommunications",
    "GARWARE": "Textiles",
    "ETERNAL": "Textiles",
    "FIRSTSOURCE": "IT Services",
    "SHARDA": "Chemicals",
    "KALYAN": "Consumer Goods",
}

# Ordered (keywords, sector) rules applied to the lower-cased security name.
# First match wins.
SECTOR_KEYWORDS: List[Tuple[Tuple[str, ...], str]] = [
    (("pharma", "lifescience"), "Pharmaceuticals"),
    (("hospital", "healthcare"), "Healthcare"),
    (("bank", "finance"), "Financial Services"),
    (("tech", "software", "it "), "Information Technology"),
    (("motor", "auto"), "Automobile"),
    (("petroleum", "oil", "gas"), "Energy"),
    (("cement", "construction", "infra"), "Infrastructure"),
    (("steel", "metal", "mining"), "Metals & Mining"),
    (("textile", "fabric"), "Textiles"),
    (("jewel",), "Consumer Goods"),
    (("etf", "gold"), "ETF"),
]


class AnalyticsConfig(BaseModel):
    """Constants and lookup tables consulted by the analytics services."""

    model_config = ConfigDict(frozen=True)

    risk_free_rate: float = 0.045
    trading_days_per_year: int = 252
    assumed_pairwise_correlation: float = 0.5

    estimated_betas: Dict[str, float] = Field(default_factory=lambda: dict(ESTIMATED_BETAS))
    default_beta: float = 1.0

    z_scores: Dict[float, float] = Field(default_factory=lambda: dict(Z_SCORES))
    default_z_score: float = 1.645

    dividend_yields: Dict[str, float] = Field(default_factory=lambda: dict(DIVIDEND_YIELDS))
    assumed_tax_rate: float = 0.25

    concentration_top_n: int = 5

    sector_symbol_map: Dict[str, str] = Field(default_factory=lambda: dict(SECTOR_SYMBOL_MAP))
    sector_keywords: List[Tuple[Tuple[str, ...], str]] = Field(
        default_factory=lambda: list(SECTOR_KEYWORDS)
    )

    def beta_for(self, symbol: str) -> float:
        beta = self.estimated_betas.get(symbol)
        # A zero beta in the table falls back to the default, as a missing entry does.
        return beta if beta else self.default_beta

    def z_score_for(self, confidence: float) -> float:
        return self.z_scores.get(confidence, self.default_z_score)


DEFAULT_ANALYTICS_CONFIG = AnalyticsConfig()
