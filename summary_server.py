import logging
import sys
from datetime import datetime
from typing import Any, Dict

from mcp.server.fastmcp import FastMCP

from summary_clients.config import Settings
from summary_clients.errors import ConfigError
from summary_clients.schedule import WeeklyTrigger
from weekly_summary import WeeklySummaryJob, configure_logging

logger = logging.getLogger('summary_server')

SETUP_INSTRUCTIONS = """
# Weekly Calendar Summary Setup Instructions

## 1. Enable APIs in Google Cloud Console
1. Go to the Google Cloud Console (https://console.cloud.google.com/)
2. Create a new project or select an existing one
3. Enable the Google Calendar API and the Gmail API
4. Create an OAuth 2.0 Client ID (Desktop app)

## 2. Get a refresh token
Run `weekly-calendar-summary-auth` with GOOGLE_CLIENT_ID and
GOOGLE_CLIENT_SECRET set. Approve the consent screen and copy the printed
refresh token into GOOGLE_REFRESH_TOKEN.

## 3. Environment (.env is supported)
- GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET, GOOGLE_REDIRECT_URI, GOOGLE_REFRESH_TOKEN
- EMAIL_USER: Gmail address the summary is sent from
- EMAIL_RECIPIENT: address the summary is sent to
- SUMMARY_TIMEZONE (optional, default America/New_York)

## 4. Available Tools
- preview_weekly_summary(): Render this week's digest without sending it
- send_weekly_summary_now(): Send the digest immediately
- next_scheduled_run(): When the weekly job fires next (Monday 08:00)
"""


def create_server(job: WeeklySummaryJob) -> FastMCP:
    mcp = FastMCP("Weekly_Calendar_Summary")
    trigger = WeeklyTrigger(job.timezone)

    @mcp.tool()
    def preview_weekly_summary() -> Dict[str, Any]:
        """Render this week's calendar digest without emailing it."""
        try:
            events, summary = job.preview()
            return {'event_count': len(events), 'summary': summary}
        except Exception as e:
            logger.exception("Preview failed")
            return {'error': str(e)}

    @mcp.tool()
    def send_weekly_summary_now() -> Dict[str, Any]:
        """Email this week's calendar digest immediately."""
        try:
            message_id = job.send()
            return {'success': True, 'message_id': message_id}
        except Exception as e:
            logger.exception("Manual send failed")
            return {'success': False, 'error': str(e)}

    @mcp.tool()
    def next_scheduled_run() -> Dict[str, Any]:
        """When the weekly summary is next scheduled to be sent."""
        fire_at = trigger.next_after(datetime.now(job.timezone))
        return {'next_run': fire_at.isoformat(), 'timezone': str(job.timezone)}

    @mcp.resource("calendar-summary://setup-instructions")
    def setup_instructions() -> str:
        """Instructions for setting up credentials for the weekly summary."""
        return SETUP_INSTRUCTIONS

    return mcp


def main() -> int:
    configure_logging()
    try:
        settings = Settings.from_env()
    except ConfigError as error:
        logger.error("Configuration error: %s", error)
        return 1

    create_server(WeeklySummaryJob.from_settings(settings)).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
