"""Create or promote the administrator account.

Usage:
    ADMIN_EMAIL=admin@example.com ADMIN_PASSWORD=secret123 python scripts/create_admin.py

Reads DATABASE_URL through Settings; the account is upserted, so re-running the
script resets the admin password.
"""

import asyncio
import logging
import os
import sys

from aixchange.config import get_settings
from aixchange.db.session import script_session
from aixchange.infrastructure.observability import setup_logging
from aixchange.services.auth_service import upsert_admin

logger = logging.getLogger("create_admin")


async def main() -> int:
    settings = get_settings()
    setup_logging(settings.log_level, "text")
    email = os.environ.get("ADMIN_EMAIL", "").strip()
    password = os.environ.get("ADMIN_PASSWORD", "")
    if not email or len(password) < 6:
        logger.error("ADMIN_EMAIL and ADMIN_PASSWORD (6+ chars) must be set")
        return 1
    async with script_session(settings.database_url) as db:
        user = await upsert_admin(db, email, password)
        user_id = user.id
    logger.info(f"Admin account ready: {email}", extra={"user_id": user_id})
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
