# tests/test_automation.py

import pytest

from src.Services.automation import automation_engine, decide, format_number


@pytest.mark.parametrize(
    "reading, threshold, expected",
    [
        (350, 300, "ON"),
        (250, 300, "OFF"),
        (300, 300, "OFF"),
        (300.0001, 300, "ON"),
        (0, 0, "OFF"),
        (1, 0, "ON"),
    ],
)
def test_decide_threshold_rule(reading, threshold, expected):
    assert decide(reading, threshold) == expected


@pytest.mark.parametrize("current", ["ON", "OFF", None])
def test_decide_ignores_current_status(current):
    assert decide(350, 300, current) == "ON"
    assert decide(250, 300, current) == "OFF"


def test_evaluate_reports_change_only_on_flip():
    assert automation_engine.evaluate(350, 300, "OFF").changed is True
    assert automation_engine.evaluate(350, 300, "ON").changed is False
    assert automation_engine.evaluate(300, 300, "OFF").changed is False


def test_decision_details_text():
    on = automation_engine.evaluate(350, 300, "OFF")
    off = automation_engine.evaluate(300, 300, "ON")

    assert on.details == "Auto control: light intensity 350 > threshold 300"
    assert off.details == "Auto control: light intensity 300 <= threshold 300"


def test_format_number():
    assert format_number(350.0) == "350"
    assert format_number(312.5) == "312.5"
