"""Tests for the timer state machine and manual entries."""

import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

from activity_timer.db import RecordStore
from activity_timer.errors import CommandError, ParseError, StorageError
from activity_timer.models import SessionState
from activity_timer.session import TimerSession, add_manual_entry, parse_local_time


class FakeClock:
    def __init__(self, start: datetime):
        self.now = start

    def advance(self, seconds: int) -> None:
        self.now += timedelta(seconds=seconds)

    def __call__(self) -> datetime:
        return self.now


def make_store(next_id=1):
    store = Mock(spec=RecordStore)
    store.insert.return_value = next_id
    return store


class TestTransitions(unittest.TestCase):

    def setUp(self):
        self.clock = FakeClock(datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc))
        self.store = make_store()
        self.session = TimerSession(self.store, clock=self.clock)

    def test_new_session_is_idle(self):
        self.assertIs(self.session.state, SessionState.IDLE)
        self.assertFalse(self.session.is_active)

    def test_start_pause_resume_stop_excludes_paused_time(self):
        self.session.start("work", "report")
        self.clock.advance(600)
        self.session.pause()
        self.clock.advance(300)
        self.session.resume()
        self.clock.advance(120)
        record = self.session.stop()

        self.assertEqual(record.total_time_seconds, 720)
        self.assertEqual(record.start_time, datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc))
        self.assertEqual(record.end_time, self.clock.now)
        self.store.insert.assert_called_once_with(record)
        self.assertEqual(record.id, 1)

    def test_multiple_pause_cycles(self):
        self.session.start("work", "report")
        for running, paused in [(10, 50), (20, 60), (30, 70)]:
            self.clock.advance(running)
            self.session.pause()
            self.clock.advance(paused)
            self.session.resume()
        self.clock.advance(5)
        record = self.session.stop()
        self.assertEqual(record.total_time_seconds, 65)

    def test_stop_while_paused_does_not_count_paused_time(self):
        self.session.start("work", "report")
        self.clock.advance(90)
        self.session.pause()
        self.clock.advance(3600)
        record = self.session.stop()
        self.assertEqual(record.total_time_seconds, 90)

    def test_fractional_seconds_are_truncated(self):
        self.session.start("", "")
        self.clock.now += timedelta(seconds=59, milliseconds=999)
        record = self.session.stop()
        self.assertEqual(record.total_time_seconds, 59)

    def test_start_trims_fields_and_stop_resets(self):
        self.session.start("  work \n", " report\n")
        self.assertEqual(self.session.category, "work")
        self.assertEqual(self.session.description, "report")
        self.session.add_detail("note")
        self.session.stop()

        self.assertIs(self.session.state, SessionState.IDLE)
        self.assertEqual(self.session.category, "")
        self.assertEqual(self.session.description, "")
        self.assertEqual(self.session.detail, [])
        self.assertIsNone(self.session.start_time)
        self.assertEqual(self.session.accumulated, timedelta(0))

    def test_session_is_reusable_after_stop(self):
        self.session.start("a", "first")
        self.clock.advance(10)
        self.session.stop()
        self.session.start("b", "second")
        self.clock.advance(20)
        record = self.session.stop()
        self.assertEqual(record.description, "second")
        self.assertEqual(record.total_time_seconds, 20)

    def test_detail_lines_kept_in_order(self):
        self.session.start("work", "report")
        self.session.add_detail("first")
        self.session.pause()
        self.session.add_detail("While Paused")
        self.session.resume()
        self.session.add_detail("third")
        record = self.session.stop()
        self.assertEqual(record.detail, ["first", "While Paused", "third"])
        self.assertEqual(record.detail_text, "first\nWhile Paused\nthird")

    def test_blank_detail_lines_ignored(self):
        self.session.start("work", "report")
        self.session.add_detail("")
        self.session.add_detail("  kept  ")
        self.session.add_detail("\t")
        self.assertEqual(self.session.detail, ["kept"])

    def test_elapsed_includes_running_interval(self):
        self.session.start("work", "report")
        self.clock.advance(30)
        self.assertEqual(self.session.elapsed(), timedelta(seconds=30))
        self.session.pause()
        self.clock.advance(100)
        self.assertEqual(self.session.elapsed(), timedelta(seconds=30))


class TestInvalidTransitions(unittest.TestCase):

    def setUp(self):
        self.clock = FakeClock(datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc))
        self.store = make_store()
        self.session = TimerSession(self.store, clock=self.clock)

    def assertRejected(self, action, *args):
        before = (
            self.session.state,
            self.session.start_time,
            self.session.last_start_time,
            self.session.accumulated,
            list(self.session.detail),
        )
        with self.assertRaises(CommandError):
            action(*args)
        after = (
            self.session.state,
            self.session.start_time,
            self.session.last_start_time,
            self.session.accumulated,
            list(self.session.detail),
        )
        self.assertEqual(before, after)

    def test_start_rejected_while_running(self):
        self.session.start("work", "report")
        self.clock.advance(5)
        self.assertRejected(self.session.start, "other", "thing")
        self.assertEqual(self.session.description, "report")

    def test_start_rejected_while_paused(self):
        self.session.start("work", "report")
        self.session.pause()
        self.assertRejected(self.session.start, "other", "thing")

    def test_pause_rejected_when_idle_or_paused(self):
        self.assertRejected(self.session.pause)
        self.session.start("work", "report")
        self.clock.advance(10)
        self.session.pause()
        self.clock.advance(10)
        self.assertRejected(self.session.pause)
        self.assertEqual(self.session.accumulated, timedelta(seconds=10))

    def test_resume_rejected_when_idle_or_running(self):
        self.assertRejected(self.session.resume)
        self.session.start("work", "report")
        self.clock.advance(10)
        self.assertRejected(self.session.resume)

    def test_stop_and_detail_rejected_when_idle(self):
        self.assertRejected(self.session.stop)
        self.assertRejected(self.session.add_detail, "note")
        self.store.insert.assert_not_called()

    def test_command_error_names_command_and_state(self):
        with self.assertRaises(CommandError) as ctx:
            self.session.pause()
        self.assertEqual(ctx.exception.command, "pause")
        self.assertIs(ctx.exception.state, SessionState.IDLE)


class TestStopWithFailingStore(unittest.TestCase):

    def test_session_reset_even_if_insert_fails(self):
        clock = FakeClock(datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc))
        store = make_store()
        store.insert.side_effect = StorageError("disk full")
        session = TimerSession(store, clock=clock)
        session.start("work", "report")
        clock.advance(10)

        with self.assertRaises(StorageError):
            session.stop()
        self.assertIs(session.state, SessionState.IDLE)
        self.assertEqual(session.description, "")


class TestParseLocalTime(unittest.TestCase):

    def test_accepted_formats(self):
        expected = datetime(2024, 6, 1, 14, 30)
        for text in ("2024-06-01 14:30", "2024/06/01 14:30"):
            self.assertEqual(parse_local_time(text, "start_time").replace(tzinfo=None), expected)
        for text in ("2024-06-01 14:30:15", "2024/06/01 14:30:15"):
            self.assertEqual(
                parse_local_time(text, "start_time").replace(tzinfo=None),
                expected.replace(second=15),
            )

    def test_result_carries_local_offset(self):
        parsed = parse_local_time(" 2024-06-01 14:30 ", "start_time")
        self.assertIsNotNone(parsed.tzinfo)

    def test_unparseable_names_field(self):
        with self.assertRaises(ParseError) as ctx:
            parse_local_time("not-a-date", "end_time")
        self.assertEqual(ctx.exception.field, "end_time")
        self.assertEqual(ctx.exception.value, "not-a-date")

    def test_iso_t_separator_not_accepted(self):
        with self.assertRaises(ParseError):
            parse_local_time("2024-06-01T14:30", "start_time")


class TestManualEntry(unittest.TestCase):

    def setUp(self):
        self.store = make_store(next_id=7)

    def test_two_hour_entry(self):
        record = add_manual_entry(
            self.store, " work ", " review ", "2024-06-01 14:30", "2024-06-01 16:30"
        )
        self.assertEqual(record.total_time_seconds, 7200)
        self.assertEqual(record.category, "work")
        self.assertEqual(record.description, "review")
        self.assertEqual(record.detail, [])
        self.assertEqual(record.id, 7)
        self.store.insert.assert_called_once_with(record)

    def test_mixed_formats(self):
        record = add_manual_entry(
            self.store, "a", "b", "2024/06/01 14:30:30", "2024-06-01 14:31"
        )
        self.assertEqual(record.total_time_seconds, 30)

    def test_detail_lines_attached(self):
        record = add_manual_entry(
            self.store, "a", "b", "2024-06-01 14:30", "2024-06-01 15:00",
            detail=["one", " two "],
        )
        self.assertEqual(record.detail, ["one", "two"])

    def test_blank_detail_lines_dropped(self):
        record = add_manual_entry(
            self.store, "a", "b", "2024-06-01 14:30", "2024-06-01 15:00",
            detail=["", "one", "  "],
        )
        self.assertEqual(record.detail, ["one"])

    def test_unparseable_start_inserts_nothing(self):
        with self.assertRaises(ParseError) as ctx:
            add_manual_entry(self.store, "a", "b", "not-a-date", "2024-06-01 16:30")
        self.assertEqual(ctx.exception.field, "start_time")
        self.store.insert.assert_not_called()

    def test_unparseable_end_inserts_nothing(self):
        with self.assertRaises(ParseError) as ctx:
            add_manual_entry(self.store, "a", "b", "2024-06-01 14:30", "tomorrow")
        self.assertEqual(ctx.exception.field, "end_time")
        self.store.insert.assert_not_called()

    def test_end_before_start_rejected(self):
        with self.assertRaises(ParseError) as ctx:
            add_manual_entry(self.store, "a", "b", "2024-06-01 16:30", "2024-06-01 14:30")
        self.assertEqual(ctx.exception.field, "end_time")
        self.store.insert.assert_not_called()

    def test_zero_length_entry_allowed(self):
        record = add_manual_entry(self.store, "a", "b", "2024-06-01 14:30", "2024-06-01 14:30")
        self.assertEqual(record.total_time_seconds, 0)


if __name__ == "__main__":
    unittest.main()
