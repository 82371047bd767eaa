"""
Weekly calendar summary job.

Every Monday at 08:00 (in SUMMARY_TIMEZONE) this reads the coming week's
events from Google Calendar and emails a digest to EMAIL_RECIPIENT.
"""

import logging
import signal
import sys
from datetime import datetime
from typing import List, Optional, Tuple

from summary_clients.auth import CredentialContext
from summary_clients.calendar_client import CalendarClient
from summary_clients.config import Settings
from summary_clients.errors import ConfigError
from summary_clients.formatter import format_weekly_summary
from summary_clients.mail_client import MailSender
from summary_clients.models import CalendarEvent
from summary_clients.schedule import WeeklyScheduler, WeeklyTrigger

logger = logging.getLogger('weekly_summary')

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


class WeeklySummaryJob:
    """Calendar -> digest -> email pipeline run by the scheduler."""

    def __init__(self, calendar: CalendarClient, mailer: MailSender, timezone):
        self.calendar = calendar
        self.mailer = mailer
        self.timezone = timezone

    @classmethod
    def from_settings(cls, settings: Settings) -> 'WeeklySummaryJob':
        context = CredentialContext.from_settings(settings)
        calendar = CalendarClient(context, settings.timezone, settings.calendar_id)
        mailer = MailSender.from_settings(settings, context)
        return cls(calendar, mailer, settings.timezone)

    def preview(self, now: Optional[datetime] = None) -> Tuple[List[CalendarEvent], str]:
        """Fetch this week's events and render the digest without sending it."""
        now = now or datetime.now(self.timezone)
        events = self.calendar.list_this_week(now)
        return events, format_weekly_summary(events, now)

    def send(self, now: Optional[datetime] = None) -> str:
        now = now or datetime.now(self.timezone)
        events = self.calendar.list_this_week(now)
        logger.info("Found %d events", len(events))
        summary = format_weekly_summary(events, now)
        return self.mailer.send(summary, now)

    def run_once(self, now: Optional[datetime] = None) -> bool:
        """Run the pipeline once; failures are logged, never raised."""
        try:
            logger.info("Starting weekly calendar summary...")
            self.send(now)
            logger.info("Weekly summary completed successfully")
            return True
        except Exception:
            logger.exception("Error in weekly calendar summary")
            return False


def configure_logging(level: str = 'INFO') -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # googleapiclient logs every discovery lookup at INFO
    logging.getLogger('googleapiclient').setLevel(logging.WARNING)


def _shutdown(signum, frame):
    logger.info("Received %s. Shutting down gracefully...", signal.Signals(signum).name)
    sys.exit(0)


def install_signal_handlers() -> None:
    signal.signal(signal.SIGTERM, _shutdown)
    signal.signal(signal.SIGINT, _shutdown)


def main() -> int:
    configure_logging()
    try:
        settings = Settings.from_env()
    except ConfigError as error:
        logger.error("Configuration error: %s", error)
        return 1
    logging.getLogger().setLevel(settings.log_level)

    job = WeeklySummaryJob.from_settings(settings)
    scheduler = WeeklyScheduler(WeeklyTrigger(settings.timezone), job.run_once)

    install_signal_handlers()
    logger.info("Calendar summary scheduler started. Waiting for next scheduled run...")
    scheduler.run_forever()
    return 0


if __name__ == "__main__":
    sys.exit(main())
