"""
One-time helper that prints a Google refresh token for GOOGLE_REFRESH_TOKEN.

Usage:
    GOOGLE_CLIENT_ID=... GOOGLE_CLIENT_SECRET=... python authorize.py
"""

import os
import sys

from dotenv import load_dotenv

from summary_clients.auth import obtain_refresh_token
from summary_clients.errors import AuthError


def main() -> int:
    load_dotenv()
    client_id = os.getenv('GOOGLE_CLIENT_ID')
    client_secret = os.getenv('GOOGLE_CLIENT_SECRET')
    if not client_id or not client_secret:
        print("GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET must be set.", file=sys.stderr)
        return 1

    redirect_uri = os.getenv('GOOGLE_REDIRECT_URI') or 'http://localhost'
    try:
        refresh_token = obtain_refresh_token(client_id, client_secret, redirect_uri)
    except AuthError as error:
        print(f"Authorization failed: {error}", file=sys.stderr)
        return 1

    print("Add this to your environment:")
    print(f"GOOGLE_REFRESH_TOKEN={refresh_token}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
