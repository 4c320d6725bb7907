#!/usr/bin/env python3
"""
Issue a development access token for a buyer, seller or courier.

The token is signed with AUTH_JWT_SECRET from config/.env, so the local
server accepts it in an "Authorization: Bearer <token>" header.

Usage:
    python scripts/issue_token.py <user_id> [--role buyer|seller|delivery] [--email EMAIL]
"""

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).parent.parent
load_dotenv(PROJECT_ROOT / "config" / ".env")

sys.path.insert(0, str(PROJECT_ROOT))

from freshcart.security.auth import create_access_token  # noqa: E402
from freshcart.security.roles import AppRole  # noqa: E402


def main():
    parser = argparse.ArgumentParser(description="Issue a development access token")
    parser.add_argument("user_id")
    parser.add_argument("--role", choices=[r.value for r in AppRole], default=AppRole.BUYER.value)
    parser.add_argument("--email", default=None)
    parser.add_argument("--expires-in", type=int, default=3600, help="Lifetime in seconds")
    args = parser.parse_args()

    token = create_access_token(
        user_id=args.user_id,
        role=AppRole(args.role),
        email=args.email,
        expires_in=args.expires_in,
    )
    print(token)


if __name__ == "__main__":
    main()
