from datetime import date, datetime

import pytest

from iharu.core.recurrence import (
    DAILY,
    WEEKLY,
    InvalidRecurrence,
    Recurrence,
    occurs_on,
    weekday_of,
)

MONDAY = date(2024, 1, 1)


def test_weekday_numbering_starts_on_sunday():
    assert weekday_of(date(2023, 12, 31)) == 0  # Sunday
    assert weekday_of(MONDAY) == 1
    assert weekday_of(date(2024, 1, 6)) == 6  # Saturday


def test_weekly_matches_listed_weekdays_only():
    rule = Recurrence(WEEKLY, frozenset({1, 3, 5}))
    assert occurs_on(rule, date(2024, 1, 8), MONDAY)  # Monday
    assert occurs_on(rule, date(2024, 1, 10), MONDAY)  # Wednesday
    assert not occurs_on(rule, date(2024, 1, 2), MONDAY)  # Tuesday
    assert not occurs_on(rule, date(2024, 1, 7), MONDAY)  # Sunday


def test_never_before_anchor():
    rule = Recurrence(WEEKLY, frozenset({1, 3, 5}))
    # 2023-12-25 is a Monday but precedes the anchor
    assert not occurs_on(rule, date(2023, 12, 25), MONDAY)
    assert not occurs_on(Recurrence(DAILY), date(2023, 12, 31), MONDAY)


def test_end_date_is_inclusive():
    rule = Recurrence(WEEKLY, frozenset({1}), end_date=date(2024, 1, 10))
    assert occurs_on(rule, date(2024, 1, 8), MONDAY)
    assert not occurs_on(rule, date(2024, 1, 15), MONDAY)

    daily = Recurrence(DAILY, end_date=date(2024, 1, 10))
    assert occurs_on(daily, date(2024, 1, 10), MONDAY)
    assert not occurs_on(daily, date(2024, 1, 11), MONDAY)


def test_daily_ignores_weekdays():
    rule = Recurrence(DAILY, frozenset({3}))
    for offset in range(7):
        assert occurs_on(rule, date(2024, 1, 1 + offset), MONDAY)


def test_empty_weekly_set_matches_nothing():
    rule = Recurrence(WEEKLY, frozenset())
    for offset in range(14):
        assert not occurs_on(rule, date(2024, 1, 1 + offset), MONDAY)


def test_unknown_frequency_never_recurs():
    rule = Recurrence("monthly")
    assert not occurs_on(rule, date(2024, 2, 1), MONDAY)


class TestFromRaw:
    def test_mapping(self):
        rule = Recurrence.from_raw(
            {"frequency": "weekly", "days_of_week": [5, 1, 3, 1], "end_date": "2024-03-01"}
        )
        assert rule == Recurrence(WEEKLY, frozenset({1, 3, 5}), date(2024, 3, 1))

    def test_object_with_attributes(self):
        class Row:
            frequency = "daily"
            days_of_week = None
            end_date = datetime(2024, 2, 1, 9, 30)

        rule = Recurrence.from_raw(Row())
        assert rule.frequency == DAILY
        assert rule.days_of_week == frozenset()
        assert rule.end_date == date(2024, 2, 1)

    def test_instance_passes_through(self):
        rule = Recurrence(DAILY)
        assert Recurrence.from_raw(rule) is rule

    def test_empty_end_date_means_open_ended(self):
        assert Recurrence.from_raw({"frequency": "daily", "end_date": ""}).end_date is None

    @pytest.mark.parametrize("raw", [
        {"frequency": "monthly"},
        {"frequency": None},
        {"frequency": "weekly", "days_of_week": [7]},
        {"frequency": "weekly", "days_of_week": [-1]},
        {"frequency": "weekly", "days_of_week": ["1"]},
        {"frequency": "weekly", "days_of_week": [True]},
        {"frequency": "weekly", "days_of_week": "135"},
        {"frequency": "weekly", "days_of_week": 3},
        {"frequency": "daily", "end_date": "next week"},
        {"frequency": "daily", "end_date": 20240101},
    ])
    def test_malformed_rules_are_rejected(self, raw):
        with pytest.raises(InvalidRecurrence):
            Recurrence.from_raw(raw)

    def test_invalid_recurrence_is_a_value_error(self):
        assert issubclass(InvalidRecurrence, ValueError)
