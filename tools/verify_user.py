"""
verify_user.py
Flip a user's verification flag without going through the allow-list.

    python -m tools.verify_user <channel_id> [--revoke]
"""

import argparse
import logging

from tubefeed import config
from tubefeed.logging_config import setup_logging
from tubefeed.store import Store

log = logging.getLogger(__name__)

def main(argv=None):
    ap = argparse.ArgumentParser(description="Verify or revoke a user")
    ap.add_argument("user_id")
    ap.add_argument("--revoke", action="store_true")
    args = ap.parse_args(argv)

    setup_logging(config.LOG_DEBUG)
    store = Store(config.DB_PATH)
    store.init_db()
    store.set_authenticated(args.user_id, not args.revoke)
    log.info("%s %s", "revoked" if args.revoke else "verified", args.user_id)

if __name__ == "__main__":
    main()
