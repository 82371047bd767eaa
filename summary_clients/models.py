"""
Data models for calendar events and the outgoing summary email.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from email.message import EmailMessage
from email.utils import formataddr
from typing import List, Optional

UNTITLED_EVENT = 'Untitled Event'


@dataclass(frozen=True)
class CalendarEvent:
    id: str
    summary: str
    start_time: Optional[datetime] = None
    start_date: Optional[date] = None
    location: str = ''
    description: str = ''

    @property
    def all_day(self) -> bool:
        return self.start_time is None


@dataclass
class DaySummary:
    label: str
    lines: List[str] = field(default_factory=list)


@dataclass
class OutboundMessage:
    sender_name: str
    sender: str
    recipient: str
    subject: str
    text: str
    html: str
    message_id: str

    def to_mime(self) -> EmailMessage:
        """Build a multipart/alternative message with plain and HTML parts."""
        message = EmailMessage()
        message['From'] = formataddr((self.sender_name, self.sender))
        message['To'] = self.recipient
        message['Subject'] = self.subject
        message['Message-ID'] = self.message_id
        message.set_content(self.text)
        message.add_alternative(self.html, subtype='html')
        return message
