"""
Calendar API client for the weekly summary job.
"""

import logging
from datetime import date, datetime, timedelta, tzinfo
from typing import Any, Dict, List, Optional, Tuple

import httplib2
from google.auth.exceptions import RefreshError, TransportError
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from .auth import CredentialContext
from .errors import AuthError, CalendarFetchError
from .models import UNTITLED_EVENT, CalendarEvent

logger = logging.getLogger(__name__)

WINDOW_DAYS = 7
PAGE_SIZE = 250


def start_of_day(moment: datetime) -> datetime:
    """Local midnight of the day containing ``moment``."""
    return datetime.combine(moment.date(), datetime.min.time(), tzinfo=moment.tzinfo)


def parse_event(item: Dict[str, Any]) -> Optional[CalendarEvent]:
    """Convert a Calendar API event resource into a CalendarEvent.

    A timed ``dateTime`` start takes precedence over an all-day ``date``.
    Returns None when the item has no usable start.
    """
    start = item.get('start') or {}
    start_time = None
    start_date = None

    if start.get('dateTime'):
        start_time = datetime.fromisoformat(start['dateTime'].replace('Z', '+00:00'))
    elif start.get('date'):
        start_date = date.fromisoformat(start['date'])
    else:
        return None

    return CalendarEvent(
        id=item.get('id', ''),
        summary=item.get('summary') or UNTITLED_EVENT,
        start_time=start_time,
        start_date=start_date,
        location=item.get('location') or '',
        description=item.get('description') or '',
    )


class CalendarClient:
    def __init__(self, context: CredentialContext, timezone: tzinfo,
                 calendar_id: str = 'primary', service=None):
        self.context = context
        self.timezone = timezone
        self.calendar_id = calendar_id
        self._service = service

    @property
    def service(self):
        if self._service is None:
            self._service = build('calendar', 'v3', credentials=self.context.credentials,
                                  cache_discovery=False)
        return self._service

    def window_for(self, now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
        """Return the [start, end) window: local midnight today plus seven days."""
        if now is None:
            now = datetime.now(self.timezone)
        else:
            now = now.astimezone(self.timezone)
        time_min = start_of_day(now)
        end_day = time_min.date() + timedelta(days=WINDOW_DAYS)
        time_max = datetime.combine(end_day, datetime.min.time(), tzinfo=self.timezone)
        return time_min, time_max

    def list_this_week(self, now: Optional[datetime] = None) -> List[CalendarEvent]:
        """Get this week's events, recurring events expanded, ordered by start."""
        time_min, time_max = self.window_for(now)
        logger.debug("Listing events from %s to %s", time_min.isoformat(), time_max.isoformat())

        events = []
        page_token = None
        try:
            while True:
                result = self.service.events().list(
                    calendarId=self.calendar_id,
                    timeMin=time_min.isoformat(),
                    timeMax=time_max.isoformat(),
                    singleEvents=True,
                    orderBy='startTime',
                    maxResults=PAGE_SIZE,
                    pageToken=page_token,
                ).execute()

                for item in result.get('items', []):
                    event = parse_event(item)
                    if event is None:
                        logger.warning("Skipping event %s without a start time", item.get('id', '?'))
                        continue
                    events.append(event)

                page_token = result.get('nextPageToken')
                if not page_token:
                    break
        except HttpError as error:
            raise CalendarFetchError(f"Calendar API error: {error}") from error
        except (RefreshError, TransportError, AuthError) as error:
            raise CalendarFetchError(f"Calendar credentials rejected: {error}") from error
        except (OSError, httplib2.HttpLib2Error) as error:
            raise CalendarFetchError(f"Calendar API unreachable: {error}") from error

        return events
