"""
Create a user without going through the HTTP API. Run from project root:
  python -m taskflow.scripts.create_user NAME EMAIL PASSWORD [--create-tables]
Example:
  python -m taskflow.scripts.create_user "Alice" alice@example.org your-secure-password
"""
import argparse
import sys

from taskflow.core import database
from taskflow.core.errors import ValidationError
from taskflow.services import auth as auth_service


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a Taskflow user.")
    parser.add_argument("name", help="Display name (1-255 chars)")
    parser.add_argument("email", help="Email address (unique, case-insensitive)")
    parser.add_argument("password", help="Password (8-128 chars)")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables first (local SQLite; use alembic elsewhere)",
    )
    args = parser.parse_args(argv)

    if args.create_tables:
        database.init_db()

    db = database.SessionLocal()
    try:
        result = auth_service.register(
            db, {"name": args.name, "email": args.email, "password": args.password}
        )
    except ValidationError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()
    print(f"Created user '{result.user.email}' with id {result.user.id}.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
