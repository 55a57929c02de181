"""
Standalone script to create every table of the data model.

Uses the same DATABASE_URL_PROD (or DATABASE_URL_TEST when TEST_MODE=true)
as the API. Existing tables are left untouched, so it is safe to re-run.
"""

import asyncio
import os
import sys

# --- Path Setup ---
# This allows the script to import the package from the 'src' directory
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

from dotenv import load_dotenv
load_dotenv(os.path.join(os.path.dirname(__file__), '..', '.env'))

from tutor_sessions.database import engine as db_engine
from tutor_sessions.database.models import Base


async def create_tables():
    db_engine.create_db_engine_and_session_factory()
    print("Creating tables...")
    async with db_engine.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    for table in Base.metadata.sorted_tables:
        print(f"  - {table.name}")
    await db_engine.dispose_db_engine()
    print("Database schema is ready.")


if __name__ == "__main__":
    asyncio.run(create_tables())
