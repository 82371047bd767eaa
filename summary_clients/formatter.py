"""
Plain-text and HTML rendering of the weekly calendar summary.
"""

from datetime import date, datetime, tzinfo
from typing import Dict, List, Sequence

from .models import CalendarEvent, DaySummary

NO_EVENTS = 'No events scheduled for this week.'
TITLE = '📅 Weekly Calendar Summary'
ALL_DAY = 'All Day'


def day_label(day: date) -> str:
    return f"{day:%A}, {day:%B} {day.day}"


def clock_time(moment: datetime) -> str:
    return moment.strftime('%I:%M %p')


def sent_on(now: datetime) -> str:
    return f"{day_label(now)}, {now.year} at {clock_time(now)}"


def _event_label_and_time(event: CalendarEvent, tz: tzinfo):
    if event.all_day:
        return day_label(event.start_date), ALL_DAY
    local = event.start_time.astimezone(tz)
    return day_label(local), clock_time(local)


def group_events_by_day(events: Sequence[CalendarEvent], tz: tzinfo) -> List[DaySummary]:
    """Group events under their day label, in first-seen order.

    Events are keyed by the rendered label, so two starts that render to the
    same weekday, month and day share a group.
    """
    groups: Dict[str, DaySummary] = {}
    for event in events:
        label, time_text = _event_label_and_time(event, tz)
        group = groups.get(label)
        if group is None:
            group = groups[label] = DaySummary(label=label)
        group.lines.append(f"\n {time_text}: {event.summary}")
        if event.location:
            group.lines.append(f"   📍 Location: {event.location}")
    return list(groups.values())


def format_weekly_summary(events: Sequence[CalendarEvent], now: datetime) -> str:
    """Render the weekly digest; ``now`` must be timezone-aware."""
    if not events:
        return NO_EVENTS

    parts = [TITLE, f"\nSent on {sent_on(now)}", '\n']
    for group in group_events_by_day(events, now.tzinfo):
        parts.append(f"\n\n📌 {group.label}:")
        parts.extend(group.lines)
    return '\n'.join(parts)


def summary_to_html(text: str) -> str:
    return (text.replace('\n', '<br>')
            .replace('📅', '📅&nbsp;')
            .replace('📌', '📌&nbsp;'))


def summary_subject(now: datetime) -> str:
    return f"{TITLE} - {now.month}/{now.day}/{now.year}"
