"""
Runs one WhatsApp reminder dispatch pass and exits.

Meant for cron, e.g. every minute:

    * * * * * cd /srv/tutor-sessions && python scripts/dispatch_reminders.py

Several copies may run at once; each due reminder is claimed before it is
sent, so none goes out twice.
"""

import asyncio
import os
import sys

# --- Path Setup ---
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

from dotenv import load_dotenv
load_dotenv(os.path.join(os.path.dirname(__file__), '..', '.env'))

from tutor_sessions.database import engine as db_engine
from tutor_sessions.services.reminder_service import ReminderDispatchService


async def run_dispatch():
    db_engine.create_db_engine_and_session_factory()
    try:
        async with db_engine.AsyncSessionLocal() as session:
            summary = await ReminderDispatchService(session).dispatch_due_reminders()
            await session.commit()
    finally:
        await db_engine.dispose_db_engine()

    print(
        f"Processed {summary.processed} reminder(s): "
        f"{summary.sent} sent, {summary.failed} failed, {summary.skipped} skipped."
    )
    return summary


if __name__ == "__main__":
    result = asyncio.run(run_dispatch())
    sys.exit(1 if result.failed else 0)
