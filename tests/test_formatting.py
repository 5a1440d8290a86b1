"""Tests for formatting and visualization modules."""
import math

import pytest

from signalsalvage.catalog import default_definition
from signalsalvage.formatting import format_number, format_text_report
from signalsalvage.metrics import MetricsCollector
from signalsalvage.report import build_report
from signalsalvage.simulation import Simulation
from signalsalvage.strategy import GreedyCheapest
from signalsalvage.terminal import Terminal


@pytest.mark.parametrize("value, expected", [
    (0, "0.00"),
    (3.14159, "3.14"),
    (12.345, "12.3"),
    (999, "999"),
    (1500, "1.50K"),
    (2.5e6, "2.50M"),
    (7.25e9, "7.25B"),
    (1e12, "1.00T"),
    (4.2e15, "4.20Qa"),
    (-1500, "-1.50K"),
    (3.5e25, "35.00Sp"),
    (5e27, "5.00e+27"),
])
def test_format_number(value, expected):
    assert format_number(value) == expected


def test_format_non_finite():
    assert format_number(math.inf) == "∞"
    assert format_number(math.nan) == "∞"


def test_text_report_sections():
    collector = MetricsCollector()
    collector.record_purchase(5.0, "generator", "scanner", 15, "signal")
    collector.record_milestone(3.0, "m_first_scan")
    collector.record_reset(50.0, "relay", 2, 50.0)
    report = build_report(collector, "GreedyCheapest", "time(60)", "Terminal condition met", 60.0)
    text = format_text_report(report)
    assert "Signal & Salvage Balance Report" in text
    assert "Strategy: GreedyCheapest" in text
    assert "FINDINGS:" in text
    assert "m_first_scan" in text
    assert "RESETS:" in text
    assert "relay   at 50.0s  +2.00  (run 50.0s, 1 purchases)" in text
    assert "SANITY: no issues" in text


def test_text_report_lists_sanity_issues():
    report = build_report(MetricsCollector(), "s", "t", "done", 1.0, sanity_issues=["bad noise"])
    assert "[WARN] bad noise" in format_text_report(report)


def test_plot_simulation(tmp_path):
    import matplotlib
    matplotlib.use("Agg")
    from signalsalvage.visualization import plot_simulation

    strategy = GreedyCheapest(scans_per_second=5)
    report = Simulation(default_definition(), strategy, Terminal.time(120), seed=1).run()
    out = tmp_path / "pacing.png"
    plot_simulation(report, output_path=str(out))
    assert out.exists()
    assert out.stat().st_size > 0
