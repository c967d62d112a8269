"""
Startup entrypoint: open local stores, then sync the signed-in user with the backend.

Env: SUPABASE_URL, SUPABASE_ANON_KEY, DEVOTIONAL_DATA_DIR, PAYSTACK_SECRET_KEY, LOG_LEVEL, LOG_FORMAT
(see devotional_core/config/env.py). Without backend credentials only local features start.
"""

import sys

from devotional_core.core.exceptions import DevotionalError
from devotional_core.logging import get_logger

logger = get_logger("main")


def main() -> int:
    from devotional_core.app import DevotionalApp

    app = DevotionalApp.bootstrap()
    try:
        if app.users.current_user_id() is None:
            logger.info("main_no_user", message="not signed in; skipping sync")
            return 0
        if app.cloud_sync is None:
            logger.info("main_sync_skipped", reason="backend_not_configured")
            return 0
        if not app.is_online():
            logger.info("main_sync_skipped", reason="offline")
            return 0
        try:
            app.sync_user_data()
        except DevotionalError as e:
            logger.error("main_sync_failed", error=str(e))
            return 1
        logger.info("main_sync_completed")
        return 0
    finally:
        app.close()


if __name__ == "__main__":
    sys.exit(main())
