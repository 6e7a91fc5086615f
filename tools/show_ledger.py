"""
show_ledger.py
Print one user's ledger (expired entries included) as a table.

    python -m tools.show_ledger <channel_id> [--active]
"""

import argparse
from tabulate import tabulate

from tubefeed import config
from tubefeed.store import Store

def rows_for(store, user_id, active_only=False):
    # Table rows for one user, best score first, expired last.
    out = []
    for vid, title, e in store.ledger_rows(user_id):
        if active_only and not e.active:
            continue
        out.append([
            vid, (title or "")[:60],
            e.raw_score if e.active else "expired",
            e.is_liked, "yes" if e.is_subscribed else "",
        ])
    return out

def main(argv=None):
    ap = argparse.ArgumentParser(description="Show a user's engagement ledger")
    ap.add_argument("user_id")
    ap.add_argument("--active", action="store_true", help="hide expired entries")
    args = ap.parse_args(argv)

    store = Store(config.DB_PATH)
    store.init_db()
    profile = store.get_profile(args.user_id)
    if profile is None:
        print(f"No profile for {args.user_id}.")
        return
    print(f"verified: {profile.authenticated}  settings: {profile.settings or '(default)'}")
    rows = rows_for(store, args.user_id, active_only=args.active)
    if not rows:
        print("Ledger is empty.")
        return
    print(tabulate(rows, headers=["Video", "Title", "Score", "Liked", "Sub"]))

if __name__ == "__main__":
    main()
