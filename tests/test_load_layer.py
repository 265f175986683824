"""
Test Load Layer - tables, charts and the markdown report
"""

import os
from datetime import date
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import polars as pl
from src.load.local_storage import load_parquet, save_aggregates, save_tidy_events
from src.load.plots import plot_all_aggregates, plot_top_events
from src.load.report_writer import format_table, render_report, write_report

AGGREGATE = pl.DataFrame(
    {"event_type": ["Tornado", "Excessive Heat", "Flash Flood"], "total": [5633.0, 1903.0, 978.0]}
)

STATS = {
    "total_events": 3,
    "first_year": 1950,
    "last_year": 2011,
    "evtype_unique": 3,
    "event_type_unique": 3,
    "matched_events": 3,
    "matched_share": 1.0,
}


def test_plot_top_events_writes_png(tmp_path):
    path = plot_top_events(AGGREGATE, "fatalities", str(tmp_path / "figs" / "top.png"))

    assert os.path.exists(path)
    with open(path, "rb") as f:
        assert f.read(8) == b"\x89PNG\r\n\x1a\n"


def test_plot_all_aggregates_one_chart_per_metric(tmp_path):
    figures = plot_all_aggregates(
        {"fatalities": AGGREGATE, "injuries": AGGREGATE}, str(tmp_path)
    )

    assert set(figures) == {"fatalities", "injuries"}
    assert all(os.path.exists(path) for path in figures.values())


def test_save_tables(tmp_path):
    tidy_path = save_tidy_events(AGGREGATE, str(tmp_path))
    paths = save_aggregates({"fatalities": AGGREGATE}, str(tmp_path))

    assert load_parquet(tidy_path).equals(AGGREGATE)
    assert pl.read_csv(paths["fatalities"]).equals(AGGREGATE)


def test_format_table_is_markdown():
    text = format_table(AGGREGATE)

    assert "| event_type" in text
    assert "Excessive Heat" in text
    assert "5,633" in text


def test_render_and_write_report(tmp_path):
    text = render_report(
        STATS,
        pl.DataFrame({"statistic": ["count"], "fatalities": [3.0]}),
        {"fatalities": AGGREGATE},
        {"fatalities": "figures/top_fatalities.png"},
        base_year=1950,
    )

    assert text.startswith("# Health and economic impact of severe weather events")
    assert "## Top event types by fatalities" in text
    assert "![Fatalities](figures/top_fatalities.png)" in text
    assert "relative to 1950 CPI" in text

    path = write_report(text, str(tmp_path / "report.md"))
    with open(path) as f:
        assert f.read() == text


def test_report_with_fixed_date_is_reproducible():
    description = pl.DataFrame({"statistic": ["count"], "fatalities": [3.0]})

    first = render_report(STATS, description, {"fatalities": AGGREGATE}, report_date=date(2012, 5, 1))
    second = render_report(STATS, description, {"fatalities": AGGREGATE}, report_date=date(2012, 5, 1))

    assert first == second
    assert "Generated 2012-05-01." in first
