"""Flip the FAS circuit-breaker flag.

    python scripts/fas_status.py down --ttl 600
    python scripts/fas_status.py up
    python scripts/fas_status.py status
"""

from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.safework.safework.attendance.service import FasStatusService
from src.safework.safework.database.connection import DBConfig, DatabaseConnection
from src.safework.safework.flags.store import MySQLFlagStore


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Manage the FAS outage flag used by the attendance gate.")
    parser.add_argument("command", choices=["down", "up", "status"])
    parser.add_argument("--ttl", type=int, default=None, help="seconds until the 'down' flag expires")
    args = parser.parse_args(argv)

    settings = importlib.import_module(get_settings_module())
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(dict(settings.DB_CONFIG)))
    fas = FasStatusService(MySQLFlagStore(conn))

    if args.command == "down":
        fas.mark_down(ttl_seconds=args.ttl)
    elif args.command == "up":
        fas.mark_up()
    print("FAS is DOWN (attendance check bypassed)" if fas.is_down() else "FAS is UP")
    return 0


if __name__ == "__main__":
    sys.exit(main())
