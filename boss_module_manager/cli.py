# ==============================================
# CLI — Command Line Entry Point
# ==============================================
#
# PURPOSE:
#   Drive the manager by hand: refresh the cache, query it,
#   inspect it, or throw it away.
#
# COMMANDS:
# ---------
# 1. Refresh the cache from the feed:
#    python -m boss_module_manager.cli refresh
#
# 2. Look up a module's ignore list (names, or IDs with --ids):
#    python -m boss_module_manager.cli lookup "Forget Me Not"
#    python -m boss_module_manager.cli lookup MemoryV2 --ids --refresh
#
# 3. Show current status:
#    python -m boss_module_manager.cli status
#
# 4. Delete the cache file:
#    python -m boss_module_manager.cli reset --confirm
#
# Without --refresh, lookup answers from the persisted cache only,
# which is keyed by ID: display names resolve only after a refresh.
#
# ==============================================

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from boss_module_manager.config import get_config
from boss_module_manager.manager import BossModuleManager
from boss_module_manager.persistence.settings_store import SettingsStore
from boss_module_manager.utils.logger import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="boss-module-manager",
        description="Keep track of which boss modules should ignore each other"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Override BOSS_LOG_LEVEL (DEBUG, INFO, WARNING...)"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("refresh", help="Fetch the feed and rewrite the cache")

    lookup = subparsers.add_parser("lookup", help="Show a module's ignore list")
    lookup.add_argument("name", type=str, help="Display name or module ID")
    lookup.add_argument("--ids", action="store_true", help="Print module IDs instead of names")
    lookup.add_argument("--refresh", action="store_true", help="Refresh before looking up")

    subparsers.add_parser("status", help="Show cache and refresh status")

    reset = subparsers.add_parser("reset", help="Delete the cache file")
    reset.add_argument("--confirm", action="store_true", help="Required to actually delete")

    return parser


async def _refresh_and_wait(manager: BossModuleManager) -> None:
    manager.refresh()
    await manager.wait_until_loaded()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    config = get_config()
    setup_logging(args.log_level or config.logging.level, config.logging.file or None)

    if args.command == "reset":
        if not args.confirm:
            print("Refusing to delete the cache without --confirm")
            return 1
        SettingsStore(config.settings_path).clear()
        print(f"✓ Removed {config.settings_path}")
        return 0

    manager = BossModuleManager(config)
    try:
        if args.command == "refresh":
            asyncio.run(_refresh_and_wait(manager))
            status = manager.get_status()
            print(json.dumps(status, indent=2, ensure_ascii=False))
            return 0 if status["refresh_state"] == "idle" else 1

        if args.command == "lookup":
            if args.refresh:
                asyncio.run(_refresh_and_wait(manager))
            if args.ids:
                result = manager.get_ignored_module_ids(args.name)
            else:
                result = manager.get_ignored_modules(args.name)
            if result is None:
                print(f"✗ No ignore list known for {args.name}")
                return 1
            for entry in result:
                print(entry)
            return 0

        print(json.dumps(manager.get_status(), indent=2, ensure_ascii=False))
        return 0
    finally:
        manager.close()


if __name__ == "__main__":
    sys.exit(main())
