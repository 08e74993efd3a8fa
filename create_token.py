#!/usr/bin/env python3
"""
Print a long-lived bearer token for an existing username.

Usage:
    python create_token.py --username omegaup --days 365
"""

import argparse

from group_membership_api.app.core.security import create_access_token


def main():
    ap = argparse.ArgumentParser(description="Issue an API token for a user.")
    ap.add_argument("--username", required=True, help="Username used as the token subject")
    ap.add_argument("--days", type=int, default=365, help="Token lifetime in days")
    args = ap.parse_args()

    print(create_access_token({"sub": args.username}, expires_delta=args.days * 24 * 60 * 60))


if __name__ == "__main__":
    main()
