"""Tests for report formatting and comparison output."""

from sc2_sim.compare import compare_and_print
from sc2_sim.format import first_event_frame, fmt_time, print_full_report


def test_fmt_time():
    assert fmt_time(0) == "0:00"
    assert fmt_time(224) == "0:10"
    assert fmt_time(1367) == "1:01"
    assert fmt_time(None) == "--"


def test_first_event_frame(make_engine):
    result = make_engine("terran", "SCV", "SupplyDepot").run_until_end()
    assert first_event_frame(result, "worker") == 269
    assert first_event_frame(result, "upgrade") is None


def test_full_report_sections(make_engine, capsys):
    result = make_engine("terran", "SCV", "SCV", "SCV", "SCV").run_until_end()
    print_full_report(result)
    out = capsys.readouterr().out
    assert "Status: STALLED" in out
    assert "--- TIMELINE ---" in out
    assert "Stopped at item 4/4: SCV (worker)" in out
    assert "idle limit reached" in out
    assert "Supply:           15/15" in out


def test_compare_marks_fastest(make_engine, capsys):
    quick = make_engine("terran", "SCV").run_until_end()
    slow = make_engine("terran", "SCV", "SCV").run_until_end()
    quick.build_order_name, slow.build_order_name = "Quick", "Slow"
    compare_and_print([quick, slow])
    out = capsys.readouterr().out
    assert "BUILD ORDER COMPARISON" in out
    assert "Fastest complete build: Quick" in out


def test_compare_nothing(capsys):
    compare_and_print([])
    assert capsys.readouterr().out == ""
