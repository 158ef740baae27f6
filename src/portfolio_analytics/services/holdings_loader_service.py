"""Holdings loading at the parsing boundary.

Turns a normalized holdings CSV (or already-decoded row dicts) into
validated `Holding` objects. Broker-specific layouts are expected to be
mapped to these column names upstream; only common header spellings are
recognised here.
"""
from __future__ import annotations

from datetime import date
from io import StringIO
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional
import logging
import re

import pandas as pd
from pydantic import ValidationError

from portfolio_analytics.data_models.analytics_config import (
    AnalyticsConfig,
    DEFAULT_ANALYTICS_CONFIG,
)
from portfolio_analytics.data_models.holding import Holding, PortfolioSnapshot

logger = logging.getLogger(__name__)

# Canonical field -> accepted header spellings (already normalised with _normalise_header).
COLUMN_ALIASES: Dict[str, tuple] = {
    "symbol": ("symbol", "ticker", "trading_symbol", "instrument"),
    "name": ("name", "description", "security_name", "company_name"),
    "quantity": ("quantity", "shares", "qty", "units"),
    "cost_basis": ("cost_basis", "average_cost", "avg_cost", "average_price", "price_paid"),
    "current_price": ("current_price", "last_price", "ltp", "price", "market_price"),
    "market_value": ("market_value", "current_value", "value"),
    "asset_type": ("asset_type", "type", "security_type"),
    "sector": ("sector", "industry"),
    "purchase_date": ("purchase_date", "date_acquired", "acquired", "buy_date"),
    "market": ("market",),
    "exchange": ("exchange",),
    "currency": ("currency",),
}

MISSING_TOKENS = {"", "na", "n/a", "nan", "none", "null", "-", "--", "unknown"}
AMOUNT_PATTERN = re.compile(r"-?\d+(?:\.\d+)?(?:[eE][-+]?\d+)?")


def _normalise_header(header: str) -> str:
    s = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", str(header).strip())
    s = re.sub(r"[^0-9a-zA-Z]+", "_", s).strip("_")
    return s.lower()


def _detect_field(row: Mapping[str, Any], canonical: str) -> Optional[Any]:
    for alias in COLUMN_ALIASES[canonical]:
        value = row.get(alias)
        if value is None:
            continue
        if isinstance(value, float) and pd.isna(value):
            continue
        if isinstance(value, str) and value.strip().lower() in MISSING_TOKENS:
            continue
        return value
    return None


def _safe_float(val: Any) -> Optional[float]:
    if val is None:
        return None
    if isinstance(val, (int, float)):
        return None if pd.isna(val) else float(val)
    s = str(val).strip()
    if s.lower() in MISSING_TOKENS:
        return None
    # Accept "(123.45)" accounting negatives, currency prefixes such as "Rs." or
    # "EUR", and thousands separators.
    negative = s.startswith("(") and s.endswith(")")
    match = AMOUNT_PATTERN.search(s.replace("'", "").replace(",", ""))
    if match is None:
        return None
    number = float(match.group(0))
    # "-$5" or "-Rs. 100": sign ahead of the currency prefix.
    if s.startswith("-") and not match.group(0).startswith("-"):
        negative = True
    return -number if negative else number


def _safe_date(val: Any) -> Optional[date]:
    if val is None:
        return None
    ts = pd.to_datetime(val, errors="coerce")
    if pd.isna(ts):
        return None
    return ts.date()


def infer_sector(
    symbol: str,
    name: str = "",
    *,
    config: AnalyticsConfig = DEFAULT_ANALYTICS_CONFIG,
) -> str:
    """Guess a sector from the symbol table, then from keywords in the name.

    Returns "Unknown" when nothing matches.
    """
    mapped = config.sector_symbol_map.get((symbol or "").upper())
    if mapped:
        return mapped

    name_lower = (name or "").lower()
    for keywords, sector in config.sector_keywords:
        if any(k in name_lower for k in keywords):
            return sector
    return "Unknown"


def load_holdings_from_records(
    records: Iterable[Mapping[str, Any]],
    *,
    config: AnalyticsConfig = DEFAULT_ANALYTICS_CONFIG,
) -> List[Holding]:
    """Build validated holdings from decoded rows.

    Rows without a symbol, with a non-positive quantity, with a non-empty
    price, cost or value cell that is not a number, or that fail model
    validation are skipped with a warning. Empty cost and price cells
    default to 0.0. A supplied market value is kept as given; other derived
    fields are computed by `Holding`.
    """
    holdings: List[Holding] = []

    for idx, raw in enumerate(records):
        row = {_normalise_header(k): v for k, v in raw.items()}

        symbol = _detect_field(row, "symbol")
        symbol = str(symbol).strip() if symbol is not None else ""
        if not symbol:
            logger.warning("Skipping row %d: missing symbol", idx)
            continue

        quantity = _safe_float(_detect_field(row, "quantity"))
        if quantity is None or quantity <= 0:
            logger.warning("Skipping row %d (%s): quantity %r is not positive", idx, symbol, quantity)
            continue

        name = str(_detect_field(row, "name") or "").strip()
        sector = _detect_field(row, "sector")
        sector = str(sector).strip() if sector is not None else infer_sector(symbol, name, config=config)

        def _optional_str(field: str) -> Optional[str]:
            v = _detect_field(row, field)
            return str(v).strip() if v is not None else None

        # Empty amount cells default; a filled cell that will not parse drops the row.
        amounts: Dict[str, Optional[float]] = {}
        unparseable = None
        for field in ("cost_basis", "current_price", "market_value"):
            cell = _detect_field(row, field)
            amounts[field] = _safe_float(cell)
            if cell is not None and amounts[field] is None:
                unparseable = (field, cell)
                break
        if unparseable is not None:
            logger.warning("Skipping row %d (%s): unparseable %s %r", idx, symbol, *unparseable)
            continue

        try:
            holding = Holding(
                symbol=symbol,
                name=name,
                quantity=quantity,
                cost_basis=amounts["cost_basis"] if amounts["cost_basis"] is not None else 0.0,
                current_price=amounts["current_price"] if amounts["current_price"] is not None else 0.0,
                market_value=amounts["market_value"],
                asset_type=_optional_str("asset_type") or "Stock",
                sector=sector,
                purchase_date=_safe_date(_detect_field(row, "purchase_date")),
                market=_optional_str("market"),
                exchange=_optional_str("exchange"),
                currency=_optional_str("currency"),
            )
        except ValidationError as exc:
            logger.warning("Skipping row %d (%s): %s", idx, symbol, exc.errors()[0].get("msg"))
            continue
        holdings.append(holding)

    return holdings


def load_portfolio_snapshot_from_csv(
    csv_path: Path | str,
    *,
    portfolio_name: Optional[str] = None,
    as_of_date: Optional[date] = None,
    config: AnalyticsConfig = DEFAULT_ANALYTICS_CONFIG,
) -> PortfolioSnapshot:
    """Load a normalized holdings CSV into a PortfolioSnapshot.

    Lines starting with Markdown code fences (```) are dropped before
    parsing. The portfolio name defaults to the file stem and the snapshot
    date to today.
    """
    path = Path(csv_path)
    if not path.exists():
        raise FileNotFoundError(f"Holdings CSV file not found: {path}")

    text = path.read_text(encoding="utf-8-sig")
    cleaned_lines = [ln for ln in text.splitlines() if not ln.strip().startswith("```")]
    cleaned_text = "\n".join(cleaned_lines)
    if not cleaned_text.strip():
        raise ValueError(f"No rows found in {path}")

    df = pd.read_csv(StringIO(cleaned_text), dtype=str, keep_default_na=False, skipinitialspace=True)
    if df.empty:
        raise ValueError(f"No rows found in {path} after parsing")

    holdings = load_holdings_from_records(df.to_dict(orient="records"), config=config)
    if not holdings:
        raise ValueError(
            f"No valid holdings found in {path}. The file needs at least Symbol and Quantity columns."
        )

    snapshot = PortfolioSnapshot(
        name=portfolio_name or path.stem,
        as_of_date=as_of_date or date.today(),
        holdings=holdings,
    )

    skipped = len(df) - len(holdings)
    logger.info(
        "Loaded portfolio %s (%s) with %d holdings (%d rows skipped)",
        snapshot.name,
        snapshot.as_of_date.isoformat(),
        len(holdings),
        skipped,
    )
    return snapshot
