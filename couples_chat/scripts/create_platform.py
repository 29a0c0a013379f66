"""
Register a tenant platform.

Run:
  python -m couples_chat.scripts.create_platform <platform_key> <name> [domain]

Prints the new platform id. Branding, features and tiers can be filled in
later directly in the chatbot_platforms table.
"""
import logging
import sys

from sqlalchemy.exc import IntegrityError

from couples_chat.database import SessionLocal, init_db
from couples_chat.services.platform import create_platform

logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) < 2:
        print(
            "Usage: python -m couples_chat.scripts.create_platform <platform_key> <name> [domain]",
            file=sys.stderr,
        )
        return 2

    platform_key, name = args[0].strip(), args[1].strip()
    domain = args[2].strip() if len(args) > 2 else None
    if not platform_key or not name:
        print("platform_key and name must not be empty", file=sys.stderr)
        return 2

    init_db()
    db = SessionLocal()
    try:
        platform = create_platform(db, platform_key, name, domain=domain)
    except IntegrityError:
        db.rollback()
        print(f"Platform '{platform_key}' already exists", file=sys.stderr)
        return 1
    finally:
        db.close()

    print(f"Created platform '{platform_key}' ({name}) with id {platform.id}")
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    raise SystemExit(main())
