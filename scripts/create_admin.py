import argparse
import getpass

from sqlalchemy import func

from gym_access.db import SessionLocal
from gym_access.models import Admin
from gym_access.services.auth import hash_password


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a back-office admin account")
    parser.add_argument("--email", required=True)
    parser.add_argument("--full-name")
    parser.add_argument("--password", help="Prompted for when omitted")
    args = parser.parse_args()

    password = args.password or getpass.getpass("Password: ")
    if len(password) < 8:
        print("Password must be at least 8 characters")
        return 1

    email = args.email.strip().lower()
    db = SessionLocal()
    try:
        existing = db.query(Admin).filter(func.lower(Admin.email) == email).first()
        if existing:
            print("Admin already exists")
            return 1

        admin = Admin(email=email, full_name=args.full_name, password_hash=hash_password(password))
        db.add(admin)
        db.commit()
        print(f"Admin created: {admin.id}")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    raise SystemExit(main())
