from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.school_office.school_office.container import build_container
from src.school_office.school_office.core.constants import REGISTRATION_SEQUENCE
from src.school_office.school_office.core.enums import Role
from src.school_office.school_office.database.bootstrap import apply_seed_sql, ensure_demo_users


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed demo classes and users")
    parser.add_argument(
        "--counter",
        type=int,
        default=None,
        help="also continue the registration counter from this value (last number already issued)",
    )
    parser.add_argument("--admin-username", default=None, help="also create an admin account with this username")
    parser.add_argument("--admin-password", default=None, help="password for --admin-username")
    parser.add_argument("--admin-name", default="Principal", help="full name for --admin-username")
    parser.add_argument("--skip-demo-users", action="store_true", help="do not create the demo accounts")
    args = parser.parse_args()
    if args.admin_username and not args.admin_password:
        parser.error("--admin-password is required with --admin-username")

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
    if not args.skip_demo_users:
        ensure_demo_users(db_config)

    if args.counter is not None or args.admin_username:
        container = build_container(db_config=db_config, settings=settings)
        if args.counter is not None:
            container.sequence_service.reset(
                current_role=Role.ADMIN, sequence_name=REGISTRATION_SEQUENCE, value=args.counter
            )
        if args.admin_username:
            container.user_service.create_admin(
                full_name=args.admin_name, username=args.admin_username, password=args.admin_password
            )

    print(
        "OK: seeded database -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    )


if __name__ == "__main__":
    main()
