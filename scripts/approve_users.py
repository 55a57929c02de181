"""
Administrative tool for the account approval gate.

New signups cannot use the app until approved. Usage:

    python scripts/approve_users.py list            # accounts pending approval
    python scripts/approve_users.py list --all      # every account
    python scripts/approve_users.py approve a@x.com b@y.com
    python scripts/approve_users.py unapprove a@x.com
"""

import argparse
import asyncio
import os
import sys

from fastapi import HTTPException

# --- Path Setup ---
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

from dotenv import load_dotenv
load_dotenv(os.path.join(os.path.dirname(__file__), '..', '.env'))

from tutor_sessions.database import engine as db_engine
from tutor_sessions.services.profile_service import ProfileService


async def list_accounts(service: ProfileService, show_all: bool):
    profiles = await service.list_profiles(pending_only=not show_all)
    if not profiles:
        print("No accounts pending approval." if not show_all else "No accounts found.")
        return
    for profile in profiles:
        state = "approved" if profile.is_approved else "PENDING"
        print(f"  {profile.email:<40} {profile.full_name or '-':<30} {state}  (signed up {profile.created_at:%Y-%m-%d})")


async def set_approval(service: ProfileService, emails: list[str], approved: bool) -> int:
    failures = 0
    for email in emails:
        try:
            await service.set_approval(email, approved)
            print(f"  - {email}: {'approved' if approved else 'approval revoked'}")
        except HTTPException:
            print(f"  - WARNING: no account with email '{email}'.")
            failures += 1
    return failures


async def main(args) -> int:
    db_engine.create_db_engine_and_session_factory()
    failures = 0
    try:
        async with db_engine.AsyncSessionLocal() as session:
            service = ProfileService(session)
            if args.command == "list":
                await list_accounts(service, args.all)
            else:
                failures = await set_approval(service, args.emails, args.command == "approve")
                await session.commit()
    finally:
        await db_engine.dispose_db_engine()
    return failures


def parse_args():
    parser = argparse.ArgumentParser(description="Approve or revoke TutorSessions accounts.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List accounts pending approval")
    list_parser.add_argument("--all", action="store_true", help="Include approved accounts")

    for name in ("approve", "unapprove"):
        sub = subparsers.add_parser(name, help=f"{name.capitalize()} accounts by email")
        sub.add_argument("emails", nargs="+")
    return parser.parse_args()


if __name__ == "__main__":
    sys.exit(1 if asyncio.run(main(parse_args())) else 0)
