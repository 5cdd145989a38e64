# service/scheduler.py
from __future__ import annotations

import logging
import os
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

import pytz
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

LOG = logging.getLogger(__name__)

JOB_ID = "posting_watch"
DEFAULT_CRON = "0 */6 * * *"


class SchedulerController:
    """
    A small façade around APScheduler so the CLI can manage lifecycle cleanly.
    """

    def __init__(self, scheduler: BackgroundScheduler) -> None:
        self._scheduler = scheduler

    def stop(self) -> None:
        if self._scheduler.running:
            LOG.info("Shutting down scheduler...")
            # wait=False -> stop immediately; an in-flight run is allowed to finish.
            self._scheduler.shutdown(wait=False)


def resolve_timezone(name: str | None = None):
    """
    APScheduler 3.x expects a pytz timezone. Accept an explicit name, then
    env TZ, defaulting to UTC.
    """
    tz_name = name or os.getenv("TZ") or "UTC"
    try:
        return pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        LOG.warning("Falling back to UTC timezone (invalid tz '%s')", tz_name)
        return pytz.UTC


def build_trigger(cron: str | None, tz) -> CronTrigger:
    """Standard 5-field crontab ('m h dom mon dow')."""
    return CronTrigger.from_crontab((cron or DEFAULT_CRON).strip(), timezone=tz)


def preview_trigger(trigger, tz, count: int = 5, start: datetime | None = None) -> list[datetime]:
    """
    Next `count` fire times strictly after `start`, for logs and tests.
    """
    now = start or datetime.now(tz=tz)
    prev = now
    times: list[datetime] = []
    for _ in range(count):
        nxt = trigger.get_next_fire_time(prev, now)
        if nxt is None:
            break
        times.append(nxt)
        prev = nxt
        now = nxt + timedelta(microseconds=1)
    return times


def start(
    job: Callable[..., Any],
    *,
    cron: str | None = None,
    timezone: str | None = None,
    kwargs: dict[str, Any] | None = None,
) -> SchedulerController:
    """
    Schedule `job(**kwargs)` on a cron trigger and start a background scheduler.
    Runs never overlap: one instance at a time, missed runs coalesce.
    """
    tz = resolve_timezone(timezone)
    trigger = build_trigger(cron, tz)

    scheduler = BackgroundScheduler(timezone=tz, job_defaults={"coalesce": True, "max_instances": 1})
    scheduler.add_job(
        job,
        trigger=trigger,
        id=JOB_ID,
        kwargs=dict(kwargs or {}),
        replace_existing=True,
        misfire_grace_time=600,
    )
    scheduler.start()

    upcoming = ", ".join(t.isoformat() for t in preview_trigger(trigger, tz, count=3))
    LOG.info("Scheduler started (cron=%r tz=%s); next runs: %s", cron or DEFAULT_CRON, tz, upcoming)
    return SchedulerController(scheduler)
