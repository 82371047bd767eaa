"""
Process configuration loaded from environment variables (and a .env file).
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from .errors import ConfigError

DEFAULT_TIMEZONE = 'America/New_York'
DEFAULT_SMTP_HOST = 'smtp.gmail.com'
DEFAULT_SMTP_PORT = 465
DEFAULT_SENDER_NAME = 'Calendar Summary'

REQUIRED_VARIABLES = (
    'GOOGLE_CLIENT_ID',
    'GOOGLE_CLIENT_SECRET',
    'GOOGLE_REDIRECT_URI',
    'GOOGLE_REFRESH_TOKEN',
    'EMAIL_USER',
    'EMAIL_RECIPIENT',
)


@dataclass(frozen=True)
class Settings:
    client_id: str
    client_secret: str
    redirect_uri: str
    refresh_token: str
    email_user: str
    email_recipient: str
    timezone_name: str = DEFAULT_TIMEZONE
    calendar_id: str = 'primary'
    smtp_host: str = DEFAULT_SMTP_HOST
    smtp_port: int = DEFAULT_SMTP_PORT
    sender_name: str = DEFAULT_SENDER_NAME
    log_level: str = 'INFO'

    @property
    def timezone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone_name)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None,
                 load_env_file: bool = True) -> 'Settings':
        """Read settings from the environment.

        Raises ConfigError listing every missing required variable, or when
        the timezone, SMTP port or log level cannot be parsed.
        """
        if load_env_file:
            load_dotenv()
        env = os.environ if environ is None else environ

        missing = [name for name in REQUIRED_VARIABLES if not env.get(name)]
        if missing:
            raise ConfigError(
                f"Missing required environment variables: {', '.join(missing)}"
            )

        timezone_name = env.get('SUMMARY_TIMEZONE') or DEFAULT_TIMEZONE
        try:
            ZoneInfo(timezone_name)
        except (ZoneInfoNotFoundError, ValueError) as error:
            raise ConfigError(f"Unknown timezone: {timezone_name}") from error

        port = env.get('SMTP_PORT') or str(DEFAULT_SMTP_PORT)
        try:
            smtp_port = int(port)
        except ValueError as error:
            raise ConfigError(f"SMTP_PORT must be an integer, got {port!r}") from error

        log_level = (env.get('LOG_LEVEL') or 'INFO').upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ConfigError(f"Unknown LOG_LEVEL: {log_level}")

        return cls(
            client_id=env['GOOGLE_CLIENT_ID'],
            client_secret=env['GOOGLE_CLIENT_SECRET'],
            redirect_uri=env['GOOGLE_REDIRECT_URI'],
            refresh_token=env['GOOGLE_REFRESH_TOKEN'],
            email_user=env['EMAIL_USER'],
            email_recipient=env['EMAIL_RECIPIENT'],
            timezone_name=timezone_name,
            calendar_id=env.get('CALENDAR_ID') or 'primary',
            smtp_host=env.get('SMTP_HOST') or DEFAULT_SMTP_HOST,
            smtp_port=smtp_port,
            sender_name=env.get('EMAIL_SENDER_NAME') or DEFAULT_SENDER_NAME,
            log_level=log_level,
        )
