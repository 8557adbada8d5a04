"""Seed the bootstrap admin and the default slots.

Usage: ADMIN_PASSWORD=... python scripts/seed_db.py
"""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.slot_payroll.slot_payroll.database.bootstrap import ensure_admin_user, ensure_default_slots


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    password = getattr(settings, "ADMIN_PASSWORD", None)
    if not password:
        raise SystemExit("ADMIN_PASSWORD is not set; refusing to seed an admin without a password.")

    ensure_admin_user(db_config, password=password, email=getattr(settings, "ADMIN_EMAIL", None))
    ensure_default_slots(db_config)

    print(
        "OK: Seeded admin and default slots -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    )


if __name__ == "__main__":
    main()
