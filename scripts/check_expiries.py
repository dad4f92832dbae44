import argparse
import logging
from datetime import datetime, timezone

from gym_access.config import get_settings
from gym_access.db import SessionLocal
from gym_access.services.expiry import run_expiry_sweep
from gym_access.utils.time import utcnow

logger = logging.getLogger("check_expiries")


def parse_datetime(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def main() -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Move lapsed memberships and trainer periods through grace and expiry")
    parser.add_argument("--now", help="Evaluate as of this ISO timestamp instead of the current time")
    parser.add_argument("--notification-days", type=int, default=settings.expiry_notification_days)
    args = parser.parse_args()

    logging.basicConfig(level=settings.log_level)
    now = parse_datetime(args.now) if args.now else utcnow()

    db = SessionLocal()
    try:
        result = run_expiry_sweep(
            db,
            now,
            membership_grace_days=settings.membership_grace_days,
            trainer_grace_days=settings.trainer_grace_days,
            notification_days=args.notification_days,
        )
    finally:
        db.close()

    for key, value in result.as_dict().items():
        print(f"{key}: {value}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
