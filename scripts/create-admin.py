"""
Grant the admin role.

Admins are ordinary users whose role is `admin`. The account must have signed
in once (the API creates the local user on the first verified token); this
script only promotes it, looked up by email.

Usage (from the project root, with .env configured):
    python scripts/create-admin.py --email someone@example.com
"""

import argparse
import os
import sys
from pathlib import Path

root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(root))
os.chdir(root)

from dotenv import load_dotenv
load_dotenv()

from quotes_api.database.models.user import User
from quotes_api.database.session import get_session
from quotes_api.utils.enums import UserRole


def main() -> int:
    ap = argparse.ArgumentParser(description="Promote an existing user to admin")
    ap.add_argument("--email", required=True, help="Email of the account")
    args = ap.parse_args()

    email = args.email.strip().lower()

    with get_session() as session:
        user = session.query(User).filter(User.email == email).first()
        if user is None:
            print(f"  No user with email {email}. Sign in to the app once, then run this again.", file=sys.stderr)
            return 1

        if user.role == UserRole.ADMIN:
            print(f"  {email} is already an admin (id={user.id})")
        else:
            user.role = UserRole.ADMIN
            print(f"  {email} promoted to admin (id={user.id})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
