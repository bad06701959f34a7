from __future__ import annotations

import argparse
import getpass
import importlib

from dotenv import load_dotenv

from hr_portal.config import get_settings_module
from hr_portal.core.enums import Role
from hr_portal.core.exceptions import DomainError
from hr_portal.database.bootstrap import apply_schema, ensure_default_break_schedule, ensure_demo_users, list_tables
from hr_portal.database.connection import DBConfig, DatabaseConnection
from hr_portal.users.mysql_user_repository import MySQLUserRepository
from hr_portal.users.service import AuthService


def create_admin(conn: DatabaseConnection, *, email_domain: str, email: str, name: str) -> None:
    password = getpass.getpass(f"Password for {email}: ")
    if password != getpass.getpass("Repeat password: "):
        raise SystemExit("Passwords do not match")

    auth = AuthService(MySQLUserRepository(conn), email_domain=email_domain)
    try:
        user = auth.provision(current_role=None, name=name, email=email, password=password, role=Role.ADMIN)
    except DomainError as e:
        raise SystemExit(f"Could not create admin: {e}")
    print(f"OK: created admin {user.email} (id={user.user_id})")


def main() -> None:
    parser = argparse.ArgumentParser(description="Create the HR portal tables")
    parser.add_argument("--demo-users", action="store_true", help="also create admin/hr/employee demo accounts")
    parser.add_argument("--admin", metavar="EMAIL", help="create an Admin account, prompting for its password")
    parser.add_argument("--admin-name", default="Administrator", help="display name for --admin")
    args = parser.parse_args()

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(dict(settings.DB_CONFIG)))

    apply_schema(conn)
    ensure_default_break_schedule(conn)
    if args.demo_users:
        ensure_demo_users(conn, email_domain=settings.ALLOWED_EMAIL_DOMAIN)

    cfg = conn.config
    print(f"OK: applied schema.sql -> {cfg.user}@{cfg.host}:{cfg.port}/{cfg.database} (tables={len(list_tables(conn))})")

    if args.admin:
        create_admin(conn, email_domain=settings.ALLOWED_EMAIL_DOMAIN, email=args.admin, name=args.admin_name)


if __name__ == "__main__":
    main()
