# tests/test_scheduler_triggers.py
from datetime import datetime

import pytz

from service import scheduler


def test_default_cron_fires_every_six_hours():
    tz = scheduler.resolve_timezone("UTC")
    trigger = scheduler.build_trigger(None, tz)
    start = tz.localize(datetime(2025, 1, 1, 1, 0, 0))

    times = scheduler.preview_trigger(trigger, tz, count=4, start=start)

    assert [t.strftime("%Y-%m-%d %H:%M") for t in times] == [
        "2025-01-01 06:00",
        "2025-01-01 12:00",
        "2025-01-01 18:00",
        "2025-01-02 00:00",
    ]


def test_custom_cron_in_local_timezone():
    tz = scheduler.resolve_timezone("America/Chicago")
    trigger = scheduler.build_trigger("30 7 * * 1-5", tz)
    # Friday evening -> next fire is Monday morning
    start = tz.localize(datetime(2025, 1, 3, 18, 0, 0))

    (first,) = scheduler.preview_trigger(trigger, tz, count=1, start=start)

    assert first.strftime("%a %H:%M") == "Mon 07:30"
    assert first.utcoffset() == tz.localize(datetime(2025, 1, 6, 7, 30)).utcoffset()


def test_invalid_timezone_falls_back_to_utc(monkeypatch):
    monkeypatch.delenv("TZ", raising=False)
    assert scheduler.resolve_timezone("Not/AZone") is pytz.UTC
    assert scheduler.resolve_timezone(None).zone == "UTC"
