#!/usr/bin/env python3
"""
Backfill the group of memberships created before groups existed.

Every membership without a group is put in the legacy default group
(consulting); memberships that already have one are untouched. Prints a
summary and exits non-zero when any row failed.

Usage:
  python scripts/migrate_member_groups.py [--json]
"""
from __future__ import annotations

import argparse
import json
import logging
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from projecthub.db.database import SessionLocal
from projecthub.services.project_service import ProjectService


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--json", action="store_true", help="print the summary as JSON")
    args = parser.parse_args(argv)

    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())

    db = SessionLocal()
    try:
        result = ProjectService(db).migrate_members_to_groups()
    finally:
        db.close()

    if args.json:
        print(json.dumps(result, indent=2))
    else:
        print(f"Total memberships:   {result['total']}")
        print(f"Updated:             {result['updated']}")
        print(f"Already had a group: {result['already_has_group']}")
        print(f"Errors:              {result['errors']}")
    return 0 if result["success"] else 1


if __name__ == "__main__":
    sys.exit(main())
