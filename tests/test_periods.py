"""Budget period resolution tests."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest
from expenseboo.models import Settings
from expenseboo.services.periods import (
    calendar_month_key,
    current_period_window,
    month_bounds,
    period_display_label,
    period_label,
    period_start,
)

from tests.conftest import monthly_date_settings, pay_day_settings


def test_pay_day_before_reset_starts_in_previous_month():
    settings = pay_day_settings(15)

    assert period_start(datetime(2024, 3, 10), settings) == datetime(2024, 2, 15)


def test_pay_day_on_or_after_reset_starts_this_month():
    settings = pay_day_settings(15)

    assert period_start(datetime(2024, 3, 15, 8, 30), settings) == datetime(2024, 3, 15)
    assert period_start(datetime(2024, 3, 28), settings) == datetime(2024, 3, 15)


def test_january_rolls_back_to_previous_december():
    settings = pay_day_settings(20)

    assert period_start(datetime(2024, 1, 5), settings) == datetime(2023, 12, 20)


def test_monthly_date_uses_reset_date_not_pay_day():
    settings = monthly_date_settings(5)
    settings.pay_day = 25

    assert period_start(datetime(2024, 6, 7), settings) == datetime(2024, 6, 5)
    assert period_start(datetime(2024, 6, 3), settings) == datetime(2024, 5, 5)


@pytest.mark.parametrize(
    ("moment", "expected"),
    [
        (datetime(2024, 2, 29, 10, 0), datetime(2024, 2, 29)),
        (datetime(2024, 3, 15), datetime(2024, 2, 29)),
        (datetime(2023, 3, 1), datetime(2023, 2, 28)),
        (datetime(2024, 4, 30), datetime(2024, 4, 30)),
        (datetime(2024, 5, 31), datetime(2024, 5, 31)),
        (datetime(2024, 5, 30), datetime(2024, 4, 30)),
    ],
)
def test_reset_day_is_clamped_to_month_length(moment, expected):
    assert period_start(moment, pay_day_settings(31)) == expected


@pytest.mark.parametrize("reset_day", [1, 10, 15, 28, 29, 30, 31])
def test_period_start_contains_and_is_idempotent(reset_day):
    for settings in (pay_day_settings(reset_day), monthly_date_settings(reset_day)):
        moment = datetime(2023, 12, 1, 18, 45)
        while moment < datetime(2025, 3, 1):
            start = period_start(moment, settings)
            assert start <= moment
            assert period_start(start, settings) == start
            moment += timedelta(days=1)


def test_invalid_reset_day_falls_back_to_input_date():
    settings = Settings()
    # Assignment bypasses validation, as a hand-edited settings file might.
    settings.pay_day = 0
    moment = datetime(2024, 3, 10, 9, 15)

    assert period_start(moment, settings) == moment


def test_period_labels_are_sortable_keys_of_the_period_start():
    settings = pay_day_settings(15)

    assert period_label(datetime(2024, 3, 10), settings) == "2024-02"
    assert period_label(datetime(2024, 1, 2), settings) == "2023-12"
    assert period_display_label(datetime(2024, 3, 20), settings) == "March 2024"
    assert sorted(["2024-02", "2023-12", "2024-10"]) == ["2023-12", "2024-02", "2024-10"]


def test_calendar_month_key_ignores_reset_policy():
    assert calendar_month_key(datetime(2024, 3, 2)) == "2024-03"


def test_current_period_window_ends_at_now():
    now = datetime(2024, 3, 10, 12, 0)

    assert current_period_window(now, pay_day_settings(15)) == (datetime(2024, 2, 15), now)


def test_month_bounds_wrap_december():
    assert month_bounds(2024, 12) == (datetime(2024, 12, 1), datetime(2025, 1, 1))
    assert month_bounds(2024, 2) == (datetime(2024, 2, 1), datetime(2024, 3, 1))
