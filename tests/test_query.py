"""Tests for the Q filter builder."""

from datetime import datetime, timedelta, timezone

import pytest

from bolddesk.query import QueryBuilder, TimePeriod, format_date_range, format_id_array


def test_conditions_joined_with_and():
    q = QueryBuilder().status(1, 2).created_on(TimePeriod.TODAY).build()
    assert q == "status:[1,2] AND createdon:today"


def test_empty_builder():
    builder = QueryBuilder().status().agents()
    assert len(builder) == 0
    assert builder.build() == ""
    assert str(builder) == ""


def test_blank_conditions_ignored():
    builder = QueryBuilder().add("").add("   ").requester_email("").subject("  ")
    assert builder.build_array() == []


def test_build_array_is_a_copy():
    builder = QueryBuilder().priority(3)
    builder.build_array().append("status:[1]")
    assert builder.build_array() == ["priority:[3]"]


def test_period_as_string():
    assert QueryBuilder().closed_on("last7days").build() == "closedon:last7days"
    assert QueryBuilder().response_due(TimePeriod.OVERDUE).build() == "responsedue:overdue"


def test_date_range_in_utc():
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    end = datetime(2024, 1, 31, 23, 59, 59, tzinfo=timezone.utc)
    assert QueryBuilder().created_on(start=start, end=end).build() == (
        'createdon:{"from":"2024-01-01T00:00:00.000Z","to":"2024-01-31T23:59:59.000Z"}'
    )


def test_date_range_offsets_converted_to_utc():
    plus_two = timezone(timedelta(hours=2))
    text = format_date_range(datetime(2024, 6, 1, 10, 0, tzinfo=plus_two), datetime(2024, 6, 1, 12, 0, tzinfo=plus_two))
    assert text == '{"from":"2024-06-01T08:00:00.000Z","to":"2024-06-01T10:00:00.000Z"}'


def test_date_requires_period_or_range():
    with pytest.raises(ValueError):
        QueryBuilder().created_on()
    with pytest.raises(ValueError):
        QueryBuilder().created_on(start=datetime(2024, 1, 1, tzinfo=timezone.utc))


def test_text_conditions_are_quoted():
    q = QueryBuilder().requester_email("ann@example.com").agent_email("bob@example.com").build()
    assert q == 'requesteremail:"ann@example.com" AND agentemail:"bob@example.com"'


def test_external_reference_ids():
    assert QueryBuilder().external_reference_ids("A-1", "B-2").build() == 'externalreferenceids:["A-1","B-2"]'


def test_flags():
    assert QueryBuilder().has_comment().build() == "hascomment:true"
    assert QueryBuilder().has_comment(False).build() == "hascomment:false"


def test_activity_conditions():
    q = QueryBuilder().activity_agent(7).activity_due_date(TimePeriod.TOMORROW).build()
    assert q == "activityagent:[7] AND activityduedate:tomorrow"


def test_format_id_array():
    assert format_id_array([]) == "[]"
    assert format_id_array(iter([5, 6])) == "[5,6]"
