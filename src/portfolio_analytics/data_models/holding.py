"""Holding and portfolio snapshot models.

`Holding` is the normalized position record every analytics function
consumes. `PortfolioSnapshot` groups the holdings imported from one file
as of a date.
"""
from __future__ import annotations

from datetime import date
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Holding(BaseModel):
    """A single position in a portfolio snapshot.

    The derived fields (`market_value`, `total_cost`, `gain_loss`,
    `gain_loss_percent`) are computed from quantity and prices only when the
    source did not supply them. A supplied `market_value` is trusted as given.
    """

    model_config = ConfigDict(frozen=True)

    symbol: str
    name: str = ""
    quantity: float = Field(gt=0)
    cost_basis: float = Field(default=0.0, ge=0)
    current_price: float = Field(default=0.0, ge=0)

    market_value: float
    total_cost: float
    gain_loss: float
    gain_loss_percent: float

    asset_type: str = "Stock"
    sector: str = "Unknown"
    purchase_date: Optional[date] = None

    # Display tags only; calculations never read these.
    market: Optional[str] = None
    exchange: Optional[str] = None
    currency: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _fill_derived_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        values = dict(data)
        quantity = float(values.get("quantity") or 0.0)

        if values.get("market_value") is None:
            values["market_value"] = quantity * float(values.get("current_price") or 0.0)
        if values.get("total_cost") is None:
            values["total_cost"] = quantity * float(values.get("cost_basis") or 0.0)
        if values.get("gain_loss") is None:
            values["gain_loss"] = float(values["market_value"]) - float(values["total_cost"])
        if values.get("gain_loss_percent") is None:
            total_cost = float(values["total_cost"])
            values["gain_loss_percent"] = (
                float(values["gain_loss"]) / total_cost * 100.0 if total_cost > 0 else 0.0
            )
        return values


class PortfolioSnapshot(BaseModel):
    """Holdings imported from one broker file.

    Attributes:
        name: Display name of the portfolio.
        as_of_date: Snapshot date.
        holdings: List of `Holding`.
    """

    name: str
    as_of_date: date
    holdings: List[Holding] = Field(default_factory=list)
