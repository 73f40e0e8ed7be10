#!/usr/bin/env python3
"""
Create the super administrator account directly in the database.

Usage:
  python scripts/create_super_admin.py --nickname root [--password secret] [--email root@example.com]
"""
from __future__ import annotations

import argparse
import secrets
import sys

from cms.core.security import hash_password
from cms.db.create_tables import create_all
from cms.db.models import UserAdmin
from cms.repositories.user_repository import UserRepository
from cms.schemas.admin import PASSWORD_PATTERN


def gen_password(length: int = 12) -> str:
    alphabet = "abcdefghijkmnopqrstuvwxyzABCDEFGHJKLMNPQRSTUVWXYZ23456789"
    return "".join(secrets.choice(alphabet) for _ in range(length))


def main() -> None:
    ap = argparse.ArgumentParser(description="Create the CMS super administrator")
    ap.add_argument("--nickname", required=True, help="login name (max 24 chars)")
    ap.add_argument("--password", help="password (default: random 12 chars)")
    ap.add_argument("--email", help="optional e-mail")
    args = ap.parse_args()

    create_all()
    repo = UserRepository()
    nickname = (args.nickname or "").strip()
    if not nickname or len(nickname) > 24:
        raise SystemExit("Invalid nickname")
    if repo.nickname_taken(nickname):
        raise SystemExit(f"Nickname '{nickname}' already exists")
    email = (args.email or "").strip() or None
    if email and repo.email_taken(email):
        raise SystemExit(f"E-mail '{email}' already registered")

    password = (args.password or "").strip() or gen_password()
    if not PASSWORD_PATTERN.match(password):
        raise SystemExit("Password must be 6-22 characters of letters, digits and _*&$#@")

    user = repo.create_user(nickname, hash_password(password), email=email, admin=UserAdmin.ADMIN)
    print("OK: super administrator created")
    print(f"  id: {user.id}")
    print(f"  nickname: {nickname}")
    print(f"  password: {password}")
    if email:
        print(f"  email: {email}")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
