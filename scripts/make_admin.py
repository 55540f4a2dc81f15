#!/usr/bin/env python3
"""
Promote a user to ADMIN

The user must have signed in once (users are provisioned on first request).
Usage: python scripts/make_admin.py student@example.com
"""
import sys
sys.path.insert(0, '.')

from sqlalchemy import text

from placement_portal.db.postgres import get_db_session
from placement_portal.schemas.schemas import UserRole


def make_admin(email: str) -> bool:
    with get_db_session() as db:
        result = db.execute(
            text("UPDATE users SET role = :role WHERE LOWER(email) = LOWER(:email)"),
            {"role": UserRole.ADMIN.value, "email": email}
        )
        return result.rowcount > 0


def main():
    if len(sys.argv) != 2:
        print("Usage: python scripts/make_admin.py <email>")
        sys.exit(2)

    email = sys.argv[1]
    if make_admin(email):
        print(f"✅ {email} is now an ADMIN")
    else:
        print(f"❌ No user with email {email}. Sign in once, then retry.")
        sys.exit(1)


if __name__ == "__main__":
    main()
