"""Tests for recurrence expansion."""

from datetime import date, datetime, time, timedelta, timezone

import pytest

from focuszone.core.recurrence import (
    collect_descendants,
    create_virtual_task,
    find_cancellation,
    future_children,
    make_tombstone,
    resolve_occurrences,
    resolve_range,
    should_include,
)
from focuszone.core.tasks import RepeatRule, Task, TaskStatus, virtual_task_id


@pytest.fixture
def start_day():
    # A Monday
    return date(2024, 1, 15)


@pytest.fixture
def make_task(start_day):
    """Factory for creating stored tasks."""
    def _make(
        task_id: str,
        title: str = "Task",
        day: date | None = None,
        at: time = time(9, 0),
        duration: int = 30,
        rule: RepeatRule = RepeatRule.NONE,
        **kwargs,
    ) -> Task:
        return Task(
            id=task_id,
            title=title,
            start_time=datetime.combine(day or start_day, at),
            duration_minutes=duration,
            repeat_rule=rule,
            **kwargs,
        )
    return _make


class TestShouldInclude:
    def test_excludes_before_start(self, make_task, start_day):
        template = make_task("t", rule=RepeatRule.DAILY)
        assert should_include(template, start_day - timedelta(days=1)) is False

    def test_excludes_start_day(self, make_task, start_day):
        template = make_task("t", rule=RepeatRule.DAILY)
        assert should_include(template, start_day) is False

    def test_daily_every_later_day(self, make_task, start_day):
        template = make_task("t", rule=RepeatRule.DAILY)
        for offset in range(1, 40):
            assert should_include(template, start_day + timedelta(days=offset))

    def test_weekly_same_weekday_only(self, make_task, start_day):
        template = make_task("t", rule=RepeatRule.WEEKLY)
        for offset in range(1, 29):
            target = start_day + timedelta(days=offset)
            assert should_include(template, target) == (target.weekday() == start_day.weekday())

    def test_monthly_same_day_of_month(self, make_task, start_day):
        template = make_task("t", rule=RepeatRule.MONTHLY)
        assert should_include(template, date(2024, 2, 15))
        assert should_include(template, date(2024, 3, 15))
        assert not should_include(template, date(2024, 2, 14))

    def test_monthly_skips_short_months(self, make_task):
        template = make_task("t", day=date(2024, 1, 31), rule=RepeatRule.MONTHLY)
        assert not should_include(template, date(2024, 2, 29))
        assert should_include(template, date(2024, 3, 31))

    @pytest.mark.parametrize("rule", [RepeatRule.NONE, RepeatRule.ONCE])
    def test_non_repeating_never_included(self, make_task, start_day, rule):
        template = make_task("t", rule=rule)
        for offset in range(1, 10):
            assert not should_include(template, start_day + timedelta(days=offset))


class TestCreateVirtualTask:
    def test_copies_template_onto_date(self, make_task):
        template = make_task("t", title="Gym", at=time(18, 30), duration=60, rule=RepeatRule.DAILY, icon="🏃", color="green")
        virtual = create_virtual_task(template, date(2024, 1, 20))

        assert virtual.id == virtual_task_id("t", date(2024, 1, 20))
        assert virtual.id != template.id
        assert virtual.title == "Gym"
        assert virtual.icon == "🏃"
        assert virtual.color == "green"
        assert virtual.duration_minutes == 60
        assert virtual.start_time == datetime(2024, 1, 20, 18, 30)
        assert virtual.status == TaskStatus.SCHEDULED
        assert virtual.is_generated_from_repeat is True
        assert virtual.repeat_rule == RepeatRule.NONE
        assert virtual.parent_task_id == "t"

    def test_completed_template_yields_open_occurrence(self, make_task):
        template = make_task("t", rule=RepeatRule.DAILY, is_completed=True, status=TaskStatus.COMPLETED)
        virtual = create_virtual_task(template, date(2024, 1, 16))
        assert virtual.is_completed is False
        assert virtual.status == TaskStatus.SCHEDULED


class TestResolveOccurrences:
    def test_standup_next_day(self, make_task):
        standup = make_task("standup", title="Standup", duration=15, rule=RepeatRule.DAILY)
        result = resolve_occurrences([standup], date(2024, 1, 16))

        assert len(result) == 1
        occurrence = result[0]
        assert occurrence.title == "Standup"
        assert occurrence.start_time == datetime(2024, 1, 16, 9, 0)
        assert occurrence.is_generated_from_repeat is True
        assert occurrence.parent_task_id == "standup"

    def test_start_day_shows_template_itself(self, make_task, start_day):
        standup = make_task("standup", title="Standup", rule=RepeatRule.DAILY)
        result = resolve_occurrences([standup], start_day)
        assert result == [standup]

    @pytest.mark.parametrize("rule", [RepeatRule.NONE, RepeatRule.ONCE])
    def test_non_repeating_only_on_own_day(self, make_task, start_day, rule):
        task = make_task("t", rule=rule)
        for offset in range(-3, 10):
            target = start_day + timedelta(days=offset)
            result = resolve_occurrences([task], target)
            assert all(not t.is_generated_from_repeat for t in result)
            assert result == ([task] if offset == 0 else [])

    def test_tombstone_suppresses_occurrence(self, make_task):
        standup = make_task("standup", title="Standup", rule=RepeatRule.DAILY)
        target = date(2024, 1, 17)
        tombstone = make_tombstone(create_virtual_task(standup, target))

        assert resolve_occurrences([standup, tombstone], target) == []
        # Other days are unaffected
        assert len(resolve_occurrences([standup, tombstone], date(2024, 1, 18))) == 1

    def test_stored_task_with_same_title_and_time_wins(self, make_task):
        standup = make_task("standup", title="Standup", rule=RepeatRule.DAILY)
        manual = make_task("manual", title="Standup", day=date(2024, 1, 16))

        result = resolve_occurrences([standup, manual], date(2024, 1, 16))
        assert result == [manual]

    def test_stored_task_at_other_time_does_not_suppress(self, make_task):
        standup = make_task("standup", title="Standup", rule=RepeatRule.DAILY)
        later = make_task("later", title="Standup", day=date(2024, 1, 16), at=time(15, 0))

        result = resolve_occurrences([standup, later], date(2024, 1, 16))
        assert [t.id for t in result] == [virtual_task_id("standup", date(2024, 1, 16)), "later"]

    def test_completed_child_replaces_virtual(self, make_task):
        standup = make_task("standup", title="Standup", rule=RepeatRule.DAILY)
        target = date(2024, 1, 16)
        child = create_virtual_task(standup, target)
        child.is_generated_from_repeat = False
        child.is_completed = True
        child.status = TaskStatus.COMPLETED

        result = resolve_occurrences([standup, child], target)
        assert len(result) == 1
        assert result[0].is_completed

    def test_sorted_with_actual_before_virtual_on_ties(self, make_task):
        standup = make_task("standup", title="Standup", rule=RepeatRule.DAILY)
        target = date(2024, 1, 16)
        same_time = make_task("other", title="Review", day=target)
        earlier = make_task("early", title="Email", day=target, at=time(8, 0))

        result = resolve_occurrences([standup, same_time, earlier], target)
        assert [t.id for t in result] == ["early", "other", virtual_task_id("standup", target)]

    def test_generated_records_are_not_sources(self, make_task):
        stray = make_task("stray", rule=RepeatRule.DAILY, is_generated_from_repeat=True)
        assert resolve_occurrences([stray], date(2024, 1, 16)) == []

    def test_idempotent(self, make_task):
        templates = [
            make_task("a", title="Standup", rule=RepeatRule.DAILY),
            make_task("b", title="Review", rule=RepeatRule.WEEKLY, at=time(14, 0)),
            make_task("c", title="Rent", rule=RepeatRule.MONTHLY, day=date(2023, 12, 22)),
        ]
        target = date(2024, 1, 22)
        assert resolve_occurrences(templates, target) == resolve_occurrences(templates, target)
        assert len(resolve_occurrences(templates, target)) == 3

    def test_empty_input(self):
        assert resolve_occurrences([], date(2024, 1, 16)) == []

    def test_aware_template_keeps_offset(self):
        eastern = timezone(timedelta(hours=-5))
        standup = Task(
            id="standup",
            title="Standup",
            start_time=datetime(2024, 1, 15, 9, 0, tzinfo=eastern),
            duration_minutes=15,
            repeat_rule=RepeatRule.DAILY,
        )
        call = Task(id="call", title="Call", start_time=datetime(2024, 1, 16, 11, 0, tzinfo=eastern), duration_minutes=30)

        result = resolve_occurrences([call, standup], date(2024, 1, 16))

        assert [t.title for t in result] == ["Standup", "Call"]
        assert result[0].start_time == datetime(2024, 1, 16, 9, 0, tzinfo=eastern)
        assert result[0].start_time.tzinfo == eastern


class TestResolveRange:
    def test_one_entry_per_day(self, make_task, start_day):
        weekly = make_task("w", rule=RepeatRule.WEEKLY)
        days = resolve_range([weekly], start_day, 14)

        assert list(days) == [start_day + timedelta(days=i) for i in range(14)]
        assert [d for d, tasks in days.items() if tasks] == [start_day, date(2024, 1, 22)]

    def test_zero_days(self, start_day):
        assert resolve_range([], start_day, 0) == {}


class TestTombstonesAndChildren:
    def test_make_tombstone(self, make_task):
        standup = make_task("standup", rule=RepeatRule.DAILY)
        occurrence = create_virtual_task(standup, date(2024, 1, 16))
        tombstone = make_tombstone(occurrence)

        assert tombstone.status == TaskStatus.CANCELLED
        assert tombstone.parent_task_id == "standup"
        assert tombstone.start_time == occurrence.start_time
        assert tombstone.is_generated_from_repeat is True

    def test_find_cancellation_requires_cancelled_status(self, make_task):
        child = make_task("c", day=date(2024, 1, 16), parent_task_id="p")
        assert find_cancellation("p", date(2024, 1, 16), [child]) is None
        child.status = TaskStatus.CANCELLED
        assert find_cancellation("p", date(2024, 1, 16), [child]) is child

    def test_collect_descendants_is_transitive(self, make_task):
        tasks = [
            make_task("root", rule=RepeatRule.DAILY),
            make_task("a", parent_task_id="root"),
            make_task("b", parent_task_id="a"),
            make_task("c", parent_task_id="b"),
            make_task("other"),
        ]
        assert [t.id for t in collect_descendants("root", tasks)] == ["a", "b", "c"]

    def test_collect_descendants_survives_cycles(self, make_task):
        tasks = [
            make_task("a", parent_task_id="b"),
            make_task("b", parent_task_id="a"),
        ]
        assert {t.id for t in collect_descendants("a", tasks)} == {"b"}

    def test_future_children(self, make_task):
        tasks = [
            make_task("past", day=date(2024, 1, 16), parent_task_id="root"),
            make_task("edge", day=date(2024, 1, 18), at=time(0, 0), parent_task_id="root"),
            make_task("future", day=date(2024, 1, 20), parent_task_id="root"),
            make_task("unrelated", day=date(2024, 1, 20)),
        ]
        result = future_children("root", datetime(2024, 1, 18), tasks)
        assert [t.id for t in result] == ["edge", "future"]
