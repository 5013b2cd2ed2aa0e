"""Tests for leaderboard.services.time_resolver — padding, bucket resolution."""
from datetime import datetime, timedelta, timezone

import pytest

from leaderboard.errors import MalformedTimestampError
from leaderboard.services.time_resolver import (
    closest_instant,
    hour_key,
    nearest_instant,
    parse_instant,
    parse_target_instant,
    resolve_closest_bucket,
)


# ---------------------------------------------------------------------------
# parse_target_instant
# ---------------------------------------------------------------------------

class TestParseTargetInstant:

    def test_date_only_pads_to_noon(self):
        assert parse_target_instant('2024-11-26') == datetime(2024, 11, 26, 12, 0, 0)

    def test_date_hour_pads_minutes_seconds(self):
        assert parse_target_instant('2024-11-26 17') == datetime(2024, 11, 26, 17, 0, 0)

    def test_date_hour_minute_pads_seconds(self):
        assert parse_target_instant('2024-11-26 17:55') == datetime(2024, 11, 26, 17, 55, 0)

    def test_full_timestamp_unchanged(self):
        assert parse_target_instant('2024-11-26 17:55:21') == datetime(2024, 11, 26, 17, 55, 21)

    def test_url_encoded_input(self):
        assert parse_target_instant('2024-11-26%2017%3A55%3A21') == datetime(2024, 11, 26, 17, 55, 21)

    @pytest.mark.parametrize('raw', [
        '',
        'yesterday',
        '2024/11/26',
        '2024-11-26T17:55:21',
        '2024-11-26 17:5',
        '2024-11-26 17:55:21.123',
        '2024-13-01',
        '2024-11-26 25',
        None,
    ])
    def test_malformed_raises(self, raw):
        with pytest.raises(MalformedTimestampError):
            parse_target_instant(raw)


class TestParseInstant:

    def test_canonical_text(self):
        assert parse_instant('2024-11-26 17:00:00') == datetime(2024, 11, 26, 17, 0, 0)

    def test_iso_with_zulu_normalized_to_naive_utc(self):
        assert parse_instant('2024-11-26T17:00:00.000Z') == datetime(2024, 11, 26, 17, 0, 0)

    def test_offset_converted_to_utc(self):
        assert parse_instant('2024-11-26T19:00:00+02:00') == datetime(2024, 11, 26, 17, 0, 0)

    @pytest.mark.parametrize('value', [None, '', '   ', 'garbage'])
    def test_unparseable_is_none(self, value):
        assert parse_instant(value) is None


class TestNearestInstant:

    def test_picks_smallest_absolute_difference(self):
        target = datetime(2024, 11, 26, 12, 0, 0)
        values = ['2024-11-25 09:00:00', '2024-11-26 14:00:00', '2024-11-26 11:30:00']
        assert nearest_instant(values, target) == '2024-11-26 11:30:00'

    def test_tie_keeps_first_encountered(self):
        target = datetime(2024, 11, 26, 12, 0, 0)
        values = ['2024-11-26 13:00:00', '2024-11-26 11:00:00']
        assert nearest_instant(values, target) == '2024-11-26 13:00:00'

    def test_empty_is_none(self):
        assert nearest_instant([], datetime(2024, 1, 1)) is None

    def test_skips_unparseable(self):
        assert nearest_instant(['nope', '2024-01-02 00:00:00'], datetime(2024, 1, 1)) == '2024-01-02 00:00:00'


def test_hour_key():
    assert hour_key(datetime(2024, 11, 26, 7, 59, 59)) == '2024-11-26 07'


# ---------------------------------------------------------------------------
# resolve_closest_bucket
# ---------------------------------------------------------------------------

class TestResolveClosestBucket:

    def test_none_when_no_data(self, db_session):
        assert resolve_closest_bucket(db_session, '2024-11-26') is None

    def test_exact_hour_match(self, db_session, add_entry):
        add_entry('A', folder_date='2024-11-26 17:42:10')
        assert resolve_closest_bucket(db_session, '2024-11-26 17') == '2024-11-26 17'

    def test_date_only_resolves_noon_bucket(self, db_session, add_entry):
        add_entry('A', folder_date='2024-11-26 12:15:00')
        add_entry('B', folder_date='2024-11-26 06:00:00')
        assert resolve_closest_bucket(db_session, '2024-11-26') == '2024-11-26 12'

    def test_exact_hour_beats_arithmetically_closer_bucket(self, db_session, add_entry):
        # target 17:59:00 — 18:00:00 is one minute away, 17:00:00 is 59 minutes
        add_entry('A', folder_date='2024-11-26 17:00:00')
        add_entry('B', folder_date='2024-11-26 18:00:00')
        assert resolve_closest_bucket(db_session, '2024-11-26 17:59:00') == '2024-11-26 17'

    def test_falls_back_to_nearest_instant(self, db_session, add_entry):
        add_entry('A', folder_date='2024-11-25 09:00:00')
        add_entry('B', folder_date='2024-11-27 09:00:00')
        add_entry('C', folder_date='2024-11-26 20:30:00')
        assert resolve_closest_bucket(db_session, '2024-11-26 15') == '2024-11-26 20'

    def test_accepts_datetime_target(self, db_session, add_entry):
        add_entry('A', folder_date='2024-11-26 09:10:00')
        assert resolve_closest_bucket(db_session, datetime(2024, 11, 26, 9, 45)) == '2024-11-26 09'

    def test_aware_utc_target_falls_back_to_nearest(self, db_session, add_entry):
        add_entry('A', folder_date='2024-11-26 17:00:00')
        target = datetime(2024, 11, 27, 9, 0, tzinfo=timezone.utc)
        assert resolve_closest_bucket(db_session, target) == '2024-11-26 17'

    def test_offset_target_uses_utc_hour(self, db_session, add_entry):
        add_entry('A', folder_date='2024-11-26 17:10:00')
        add_entry('B', folder_date='2024-11-26 19:50:00')
        # 19:30 at +02:00 is 17:30 UTC
        target = datetime(2024, 11, 26, 19, 30, tzinfo=timezone(timedelta(hours=2)))
        assert resolve_closest_bucket(db_session, target) == '2024-11-26 17'

    def test_pools_generic_tables(self, db_session, add_entry, make_table):
        add_entry('A', folder_date='2024-11-20 10:00:00')
        make_table('XBLTotal2', rows=[{'field4': 'B', 'field11': '2024-11-26 17:05:00'}])
        assert resolve_closest_bucket(db_session, '2024-11-26 16') == '2024-11-26 17'

    def test_table_without_capture_column_is_ignored(self, db_session, add_entry, make_table):
        add_entry('A', folder_date='2024-11-26 08:00:00')
        make_table('XBLTotal3', columns=['field4', 'field10'], rows=[{'field4': 'B', 'field10': '5'}])
        assert resolve_closest_bucket(db_session, '2024-11-26 09') == '2024-11-26 08'

    def test_malformed_target_raises(self, db_session, add_entry):
        add_entry('A')
        with pytest.raises(MalformedTimestampError):
            resolve_closest_bucket(db_session, 'last tuesday')


class TestClosestInstant:

    def test_returns_stored_value(self, db_session, add_entry):
        add_entry('A', folder_date='2024-11-26 17:00:00', data_date='2024-11-26 17:00:04')
        add_entry('B', folder_date='2024-11-27 09:00:00', data_date='2024-11-27 09:00:02')
        target = datetime(2024, 11, 27, 6, 0, 0)
        assert closest_instant(db_session, 'folder_date', target) == '2024-11-27 09:00:00'
        assert closest_instant(db_session, 'data_date', target) == '2024-11-27 09:00:02'

    def test_none_when_empty(self, db_session):
        assert closest_instant(db_session, 'folder_date', datetime(2024, 1, 1)) is None

    def test_aware_target(self, db_session, add_entry):
        add_entry('A', folder_date='2024-11-26 17:00:00')
        add_entry('B', folder_date='2024-11-27 09:00:00')
        target = datetime(2024, 11, 27, 10, 0, tzinfo=timezone(timedelta(hours=1)))
        assert closest_instant(db_session, 'folder_date', target) == '2024-11-27 09:00:00'
