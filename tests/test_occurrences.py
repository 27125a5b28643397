from datetime import date
from types import SimpleNamespace

from iharu.core.occurrences import (
    matches_date,
    occurrences_between,
    occurrences_on,
    start_minutes,
    upcoming,
)
from iharu.core.visibility import CHILD, PARENT, Viewer, ViewerScope

ALL = ViewerScope.all()
MONDAY = date(2024, 1, 1)


def event(id, start_date=MONDAY, recurrence=None, child_id=None, start_time=None, is_all_day=False):
    return SimpleNamespace(
        id=id,
        family_id="fam_1",
        child_id=child_id,
        start_date=start_date,
        start_time=start_time,
        is_all_day=is_all_day,
        recurrence=recurrence,
    )


def ids(occurrences):
    return [o.event.id for o in occurrences]


def test_one_off_event_matches_only_its_date():
    e = event("a")
    assert ids(occurrences_on([e], MONDAY, ALL)) == ["a"]
    assert ids(occurrences_on([e], date(2024, 1, 8), ALL)) == []


def test_weekly_mon_wed_fri():
    e = event("a", recurrence={"frequency": "weekly", "days_of_week": [1, 3, 5]})
    assert ids(occurrences_on([e], date(2024, 1, 8), ALL)) == ["a"]
    assert ids(occurrences_on([e], date(2024, 1, 2), ALL)) == []
    assert ids(occurrences_on([e], date(2023, 12, 25), ALL)) == []


def test_end_date_boundary():
    e = event("a", recurrence={"frequency": "weekly", "days_of_week": [1], "end_date": date(2024, 1, 10)})
    assert ids(occurrences_on([e], date(2024, 1, 8), ALL)) == ["a"]
    assert ids(occurrences_on([e], date(2024, 1, 15), ALL)) == []


def test_empty_weekdays_keep_only_anchor():
    e = event("a", recurrence={"frequency": "weekly", "days_of_week": []})
    assert matches_date(e, MONDAY)
    assert not any(matches_date(e, date(2024, 1, d)) for d in range(2, 31))


def test_anchor_matches_even_off_weekday():
    # Anchored on a Monday, repeating Tuesdays only
    e = event("a", recurrence={"frequency": "weekly", "days_of_week": [2]})
    assert matches_date(e, MONDAY)
    assert matches_date(e, date(2024, 1, 2))


def test_bad_recurrence_does_not_affect_siblings():
    broken = event("broken", recurrence={"frequency": "weekly", "days_of_week": [9]})
    daily = event("daily", recurrence={"frequency": "daily"})
    assert ids(occurrences_on([broken, daily], date(2024, 1, 3), ALL)) == ["daily"]
    # The broken rule still has its anchor date
    assert ids(occurrences_on([broken, daily], MONDAY, ALL)) == ["broken", "daily"]


def test_empty_inputs():
    assert list(occurrences_on([], MONDAY, ALL)) == []
    assert list(occurrences_on([event("a")], None, ALL)) == []
    assert list(occurrences_between([], MONDAY, date(2024, 1, 31), ALL)) == []


def test_event_without_start_date_never_matches():
    assert not matches_date(event("a", start_date=None), MONDAY)


def test_display_order():
    events = [
        event("untimed"),
        event("late", start_time="15:00"),
        event("allday", is_all_day=True, start_time="10:00"),
        event("early", start_time="08:30"),
        event("garbled", start_time="8h"),
        event("early2", start_time="08:30"),
    ]
    assert ids(occurrences_on(events, MONDAY, ALL)) == [
        "allday", "early", "early2", "late", "untimed", "garbled",
    ]


def test_start_minutes():
    assert start_minutes("00:00") == 0
    assert start_minutes("23:59") == 23 * 60 + 59
    assert start_minutes("24:00") is None
    assert start_minutes("") is None
    assert start_minutes(None) is None
    assert start_minutes("noon") is None


def test_scope_applies():
    family_wide = event("family")
    kid = event("kid", child_id="chd_a")
    other = event("other", child_id="chd_b")
    scope = ViewerScope.owner_only("chd_a")
    assert ids(occurrences_on([family_wide, kid, other], MONDAY, scope)) == ["family", "kid"]
    assert ids(occurrences_on([family_wide, kid, other], MONDAY, ViewerScope.none())) == []


def test_range_lists_each_matching_date():
    e = event("a", recurrence={"frequency": "weekly", "days_of_week": [1, 3]})
    occurrences = list(occurrences_between([e], MONDAY, date(2024, 1, 14), ALL))
    assert [o.date for o in occurrences] == [
        date(2024, 1, 1), date(2024, 1, 3), date(2024, 1, 8), date(2024, 1, 10),
    ]


def test_upcoming_excludes_today():
    e = event("a", recurrence={"frequency": "daily"})
    occurrences = list(upcoming([e], MONDAY, 3, ALL))
    assert [o.date for o in occurrences] == [date(2024, 1, 2), date(2024, 1, 3), date(2024, 1, 4)]
    assert list(upcoming([e], MONDAY, 0, ALL)) == []


def test_family_wide_versus_child_events_on_tuesday():
    """Tue/Thu family event plus a Mon/Wed/Fri event owned by one child."""
    tue_thu = event("swim", recurrence={"frequency": "weekly", "days_of_week": [2, 4]})
    mon_wed_fri = event("piano", child_id="chd_a", recurrence={"frequency": "weekly", "days_of_week": [1, 3, 5]})
    events = [tue_thu, mon_wed_fri]
    tuesday, wednesday = date(2024, 1, 9), date(2024, 1, 10)

    child = Viewer(user_id="usr_kid", role=CHILD, family_id="fam_1", owner_id="chd_a")
    parent = Viewer(user_id="usr_mom", role=PARENT, family_id="fam_1")

    assert ids(occurrences_on(events, tuesday, child.scope())) == ["swim"]
    assert ids(occurrences_on(events, tuesday, parent.scope())) == ["swim"]
    assert ids(occurrences_on(events, wednesday, parent.scope())) == ["piano"]
    assert ids(occurrences_on(events, wednesday, child.scope())) == ["piano"]
