"""Command-line entry point for administrative tasks.

Commands:
    setup         Write a .env file with freshly generated JWT secrets.
    create-admin  Create an ADMIN account interactively.

Usage:
    python main.py setup
    python main.py create-admin
"""

import getpass
import logging
import secrets
import sys
from pathlib import Path
from typing import Optional

from config import API_PORT, API_PREFIX, ROOT_DIR

logger = logging.getLogger(__name__)

ENV_TEMPLATE = """# Server
API_HOST=0.0.0.0
API_PORT={api_port}
API_PREFIX={api_prefix}

# Database (any SQLAlchemy URL)
DATABASE_URL=sqlite:///data/school_management.db

# JWT
JWT_ACCESS_SECRET={access_secret}
JWT_REFRESH_SECRET={refresh_secret}
ACCESS_TOKEN_EXPIRE_MINUTES=15
REFRESH_TOKEN_EXPIRE_DAYS=7

# Rate limiting (per client IP)
RATE_LIMIT_DEFAULT=100 per 15 minutes
RATE_LIMIT_AUTH=5 per 15 minutes

# Email (leave SMTP_HOST empty to log mail instead of sending)
FRONTEND_URL=http://localhost:3000
SMTP_HOST=
SMTP_PORT=587
SMTP_USER=
SMTP_PASS=
SMTP_FROM="SchoolMS <no-reply@schoolms.local>"
"""


def write_env_file(env_path: Path) -> bool:
    """Create ``env_path`` with generated secrets unless it already exists.

    Args:
        env_path: Location of the .env file.

    Returns:
        True if the file was written, False if it already existed.
    """
    if env_path.exists():
        return False
    content = ENV_TEMPLATE.format(
        api_port=API_PORT,
        api_prefix=API_PREFIX,
        access_secret=secrets.token_hex(64),
        refresh_secret=secrets.token_hex(64),
    )
    env_path.write_text(content, encoding="utf-8")
    return True


def setup(env_path: Optional[Path] = None) -> None:
    """Prepare a fresh checkout for local development."""
    env_path = env_path or ROOT_DIR / ".env"
    print("Setting up School Management API...\n")
    if write_env_file(env_path):
        print(f"Created {env_path} with generated JWT secrets")
    else:
        print(f"{env_path} already exists, skipping creation")

    base_url = f"http://localhost:{API_PORT}"
    print("\nNext steps:")
    print("1. Review the .env file (database URL, SMTP settings)")
    print('2. Run: pip install -e ".[test]"')
    print("3. Run: python src/app.py")
    print("\nOnce running, visit:")
    print(f"- API: {base_url}{API_PREFIX}")
    print(f"- Docs: {base_url}/docs")
    print(f"- Health: {base_url}/health")


def create_admin() -> None:
    """Prompt for account details and create an ADMIN user."""
    # Imported here so `setup` works before a database is configured
    from core.database import SessionLocal, init_db
    from core.exceptions import SchoolAPIError
    from schemas.user import Role
    from utils.user_manager import UserManager

    email = input("Email: ").strip()
    first_name = input("First name: ").strip()
    last_name = input("Last name: ").strip()
    password = getpass.getpass("Password: ")
    if password != getpass.getpass("Confirm password: "):
        print("Passwords do not match.")
        sys.exit(1)
    if len(password) < 6:
        print("Password must be at least 6 characters.")
        sys.exit(1)

    init_db()
    db = SessionLocal()
    try:
        model = UserManager(db).create_user(
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            role=Role.ADMIN,
        )
    except SchoolAPIError as e:
        print(f"Could not create admin: {e.message}")
        sys.exit(1)
    finally:
        db.close()
    print(f"Created ADMIN {model.email} ({model.user_id})")


COMMANDS = {
    "setup": setup,
    "create-admin": create_admin,
}


def main() -> None:
    """Main entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    if len(sys.argv) < 2 or sys.argv[1] not in COMMANDS:
        print(__doc__)
        sys.exit(2)

    try:
        COMMANDS[sys.argv[1]]()
    except KeyboardInterrupt:
        print("\n\nInterrupted by user.")


if __name__ == "__main__":
    main()
