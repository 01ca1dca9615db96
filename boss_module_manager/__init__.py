# ==============================================
# Boss Module Manager
# ==============================================
#
# Keeps track of which boss modules should ignore each other.
#
# Package Structure (5 Topics + Facade):
#
# boss_module_manager/
# ├── persistence/     # Topic 1: BossModules.json load/save + migration
# ├── feed/            # Topic 2: Fetch the remote module feed
# ├── normalization/   # Topic 3: Name ↔ ID resolution, ID-keyed table
# ├── refresh/         # Topic 4: Async refresh + atomic publish
# ├── lookup/          # Topic 5: Ignore-list queries
# ├── config.py        # Configuration management
# ├── errors.py        # Error taxonomy
# ├── manager.py       # BossModuleManager (host-facing surface)
# └── cli.py           # Command line entry point
#
# ==============================================

from .manager import BossModuleManager

__version__ = "0.1.0"

__all__ = ["BossModuleManager"]
