from datetime import date
from pathlib import Path

import pytest

from portfolio_analytics.services.holdings_loader_service import (
    _safe_float,
    infer_sector,
    load_holdings_from_records,
    load_portfolio_snapshot_from_csv,
)


def _write_csv(path: Path, header: str, rows: list[str]):
    path.write_text("\n".join([header] + rows), encoding="utf-8")


def test_loader_basic_normalized_columns(tmp_path):
    p = tmp_path / "brokerage.csv"
    header = "symbol,name,quantity,cost_basis,current_price,asset_type,sector,purchase_date"
    rows = [
        "AAPL,Apple Inc.,50,150.00,185.50,Stock,Technology,2023-01-15",
        "VOO,Vanguard S&P 500 ETF,40,380.00,425.30,ETF,Index Fund,2023-01-08",
    ]
    _write_csv(p, header, rows)

    snap = load_portfolio_snapshot_from_csv(p, as_of_date=date(2024, 6, 30))

    assert snap.name == "brokerage"
    assert snap.as_of_date == date(2024, 6, 30)
    assert [h.symbol for h in snap.holdings] == ["AAPL", "VOO"]
    aapl = snap.holdings[0]
    assert aapl.market_value == pytest.approx(50 * 185.5)
    assert aapl.total_cost == pytest.approx(50 * 150.0)
    assert aapl.purchase_date == date(2023, 1, 15)
    assert snap.holdings[1].asset_type == "ETF"


def test_loader_header_aliases_and_formatted_numbers(tmp_path):
    p = tmp_path / "export.csv"
    header = "Ticker,Description,Shares,Average Cost,Last Price,Security Type,Industry,Date Acquired"
    rows = [
        'MSFT,Microsoft Corporation,"1,000","$280.00","$375.25",Stock,Technology,02/20/2023',
    ]
    _write_csv(p, header, rows)

    snap = load_portfolio_snapshot_from_csv(p, portfolio_name="Retirement")

    h = snap.holdings[0]
    assert snap.name == "Retirement"
    assert h.symbol == "MSFT"
    assert h.quantity == pytest.approx(1000.0)
    assert h.cost_basis == pytest.approx(280.0)
    assert h.current_price == pytest.approx(375.25)
    assert h.sector == "Technology"
    assert h.purchase_date == date(2023, 2, 20)


def test_loader_drops_zero_quantity_and_missing_symbol(tmp_path, caplog):
    p = tmp_path / "holdings.csv"
    header = "symbol,quantity,cost_basis,current_price"
    rows = [
        "AAPL,10,100,120",
        "CASH,0,1,1",
        ",5,10,10",
        "TSLA,-2,200,250",
    ]
    _write_csv(p, header, rows)

    with caplog.at_level("WARNING"):
        snap = load_portfolio_snapshot_from_csv(p)

    assert [h.symbol for h in snap.holdings] == ["AAPL"]
    assert "quantity" in caplog.text


def test_loader_keeps_supplied_market_value(tmp_path):
    p = tmp_path / "holdings.csv"
    _write_csv(p, "symbol,quantity,cost_basis,current_price,market_value", ["VTI,10,200,245,2500"])

    snap = load_portfolio_snapshot_from_csv(p)
    assert snap.holdings[0].market_value == pytest.approx(2500.0)
    assert snap.holdings[0].gain_loss == pytest.approx(500.0)


def test_loader_strips_code_fences(tmp_path):
    p = tmp_path / "fenced.csv"
    p.write_text("```csv\nsymbol,quantity,cost_basis,current_price\nKO,10,50,60\n```\n", encoding="utf-8")

    snap = load_portfolio_snapshot_from_csv(p)
    assert len(snap.holdings) == 1
    assert snap.holdings[0].symbol == "KO"


def test_loader_infers_missing_sector(tmp_path):
    p = tmp_path / "india.csv"
    header = "symbol,name,quantity,cost_basis,current_price,sector"
    rows = [
        "HDFCBANK,HDFC Bank Ltd,10,1500,1650,",
        "NEWCO,Sun Lifescience Pharma Ltd,5,100,90,",
        "XYZ,Mystery Holdings,1,10,10,",
    ]
    _write_csv(p, header, rows)

    snap = load_portfolio_snapshot_from_csv(p)
    sectors = {h.symbol: h.sector for h in snap.holdings}
    assert sectors == {
        "HDFCBANK": "Financial Services",
        "NEWCO": "Pharmaceuticals",
        "XYZ": "Unknown",
    }


def test_loader_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_portfolio_snapshot_from_csv(tmp_path / "nope.csv")


def test_loader_without_valid_holdings_raises(tmp_path):
    p = tmp_path / "bad.csv"
    _write_csv(p, "symbol,quantity", ["AAPL,0", "MSFT,abc"])

    with pytest.raises(ValueError):
        load_portfolio_snapshot_from_csv(p)


def test_load_holdings_from_records_camel_case_keys():
    records = [
        {"symbol": "NVDA", "quantity": 15, "costBasis": 450.0, "currentPrice": 495.75,
         "assetType": "Stock", "sector": "Technology", "purchaseDate": "2023-05-12"},
    ]
    holdings = load_holdings_from_records(records)

    assert len(holdings) == 1
    assert holdings[0].cost_basis == pytest.approx(450.0)
    assert holdings[0].current_price == pytest.approx(495.75)
    assert holdings[0].purchase_date == date(2023, 5, 12)


def test_infer_sector_symbol_then_keywords():
    assert infer_sector("TCS", "Tata Consultancy Services") == "Information Technology"
    assert infer_sector("ABC", "Apollo Hospitals Enterprise") == "Healthcare"
    assert infer_sector("GOLDBEES", "Nippon India ETF Gold BeES") == "ETF"
    assert infer_sector("ABC", "Something Else") == "Unknown"


def test_loader_reads_amounts_behind_currency_prefixes(tmp_path):
    p = tmp_path / "prefixed.csv"
    header = "symbol,quantity,cost_basis,current_price"
    rows = [
        'RELIANCE,10,"Rs. 3,500.50","₹1,200"',
        "SAP,4,EUR 100,EUR 120.5",
    ]
    _write_csv(p, header, rows)

    snap = load_portfolio_snapshot_from_csv(p)

    by_symbol = {h.symbol: h for h in snap.holdings}
    assert by_symbol["RELIANCE"].cost_basis == pytest.approx(3500.5)
    assert by_symbol["RELIANCE"].current_price == pytest.approx(1200.0)
    assert by_symbol["SAP"].cost_basis == pytest.approx(100.0)
    assert by_symbol["SAP"].current_price == pytest.approx(120.5)


@pytest.mark.parametrize(
    "cell, expected",
    [
        ("Rs. 3,500.50", 3500.5),
        ("₹1,200", 1200.0),
        ("EUR 100", 100.0),
        ("CHF 1'045.50", 1045.5),
        ("(7.25)", -7.25),
        ("-$5", -5.0),
        ("-Rs. 100", -100.0),
        ("1.5e3", 1500.0),
        ("abc", None),
        ("n/a", None),
    ],
)
def test_safe_float_cells(cell, expected):
    assert _safe_float(cell) == expected


def test_loader_skips_rows_with_unparseable_amounts(tmp_path, caplog):
    p = tmp_path / "holdings.csv"
    header = "symbol,quantity,cost_basis,current_price,market_value"
    rows = [
        "AAPL,10,100,120,",
        "MSFT,5,abc,300,",
        "KO,5,50,n/a price,",
        "VTI,2,200,,",
        "JNJ,3,150,160,lots",
    ]
    _write_csv(p, header, rows)

    with caplog.at_level("WARNING"):
        snap = load_portfolio_snapshot_from_csv(p)

    assert [h.symbol for h in snap.holdings] == ["AAPL", "VTI"]
    assert snap.holdings[1].current_price == 0.0
    assert "unparseable cost_basis 'abc'" in caplog.text
    assert "unparseable current_price" in caplog.text
    assert "unparseable market_value 'lots'" in caplog.text
