from datetime import datetime, timedelta, timezone

from app.utils.time import coerce_datetime, ensure_utc, utc_now


def test_coerce_datetime_parses_z_suffix():
    dt = coerce_datetime("2026-01-01T00:00:00Z")
    assert dt is not None
    assert dt.tzinfo is not None
    assert dt.utcoffset() == timedelta(0)
    assert dt.isoformat().endswith("+00:00")


def test_coerce_datetime_parses_offset():
    dt = coerce_datetime("2026-01-01T02:00:00+02:00")
    assert dt is not None
    assert dt.tzinfo is not None
    assert dt.utcoffset() == timedelta(0)
    assert dt.hour == 0


def test_coerce_datetime_parses_naive_as_utc():
    dt = coerce_datetime("2026-01-01T00:00:00")
    assert dt is not None
    assert dt.tzinfo is not None
    assert dt.utcoffset() == timedelta(0)

    time_diff = utc_now() - dt
    assert isinstance(time_diff, timedelta)


def test_coerce_datetime_rejects_garbage():
    assert coerce_datetime("next tuesday") is None
    assert coerce_datetime(42) is None
    assert coerce_datetime(None) is None


def test_ensure_utc_converts_offsets_and_naive_values():
    aware = datetime(2026, 3, 1, 11, 0, tzinfo=timezone(timedelta(hours=2)))
    assert ensure_utc(aware) == datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)
    assert ensure_utc(aware).tzinfo is timezone.utc
    assert ensure_utc(datetime(2026, 3, 1, 9, 0)).tzinfo is timezone.utc
