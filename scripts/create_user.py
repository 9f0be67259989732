"""
Create an account, or set a new password for an existing one.

Usage:
  python -m scripts.create_user you@example.com 'S3cret-pass'
  python -m scripts.create_user you@example.com 'N3w-pass' --set-password
"""
from __future__ import annotations

import argparse

from dotenv import load_dotenv

from core.database import create_user, get_user_by_email, init_db, update_user_password


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("email")
    parser.add_argument("password")
    parser.add_argument(
        "--set-password",
        action="store_true",
        help="update the password of an existing account instead of failing",
    )
    args = parser.parse_args(argv)

    load_dotenv(override=True)
    init_db()

    existing = get_user_by_email(args.email)
    if existing and not args.set_password:
        print(f"Account already exists for {args.email} (id={existing['id']}). Use --set-password to change it.")
        return 1
    if existing:
        update_user_password(existing["id"], args.password)
        print(f"Password updated for {args.email} (id={existing['id']})")
        return 0
    if args.set_password:
        print(f"No account with that email exists: {args.email}")
        return 1

    user_id = create_user(args.email, args.password)
    print(f"Created account {args.email} (id={user_id})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
