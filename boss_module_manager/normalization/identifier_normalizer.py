# ==============================================
# IdentifierNormalizer
# ==============================================
#
# PURPOSE:
#   Turn the raw feed array into an ID-keyed ignore table plus
#   the name ↔ ID index needed to answer lookups by display name.
#
# WHY THIS CLASS EXISTS:
#   Upstream ignore lists mix identifier spaces. An entry may be a
#   display name ("Forget Me Not") or a module ID ("MemoryV2").
#   The persisted table must only ever contain IDs, so every entry
#   is pushed through the name → ID map before it is stored.
#
# ALGORITHM (one run per successful fetch):
# -----------------------------------------
#   Pass 1: descriptors with string Name AND string ModuleID
#           → id_to_name[id] = name, name_to_id[name] = id
#
#   Pass 2: descriptors with string Name AND a valid ignore list
#           (IgnoreProcessed preferred over Ignore; valid = list
#           of strings only)
#           → table[own id] = [name_to_id.get(e, e) for e in list]
#           Descriptor without an ID → skipped, logged.
#           Descriptor with a non-string entry → skipped silently.
#
#   Both maps and the table are built from scratch every run.
#
# ==============================================

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

NAME_KEY = "Name"
MODULE_ID_KEY = "ModuleID"
IGNORE_KEY = "Ignore"
IGNORE_PROCESSED_KEY = "IgnoreProcessed"


@dataclass(frozen=True)
class NameIdIndex:
    """Bidirectional display name ↔ module ID maps."""
    id_to_name: Dict[str, str] = field(default_factory=dict)
    name_to_id: Dict[str, str] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.id_to_name)


@dataclass(frozen=True)
class IgnoreSnapshot:
    """
    The ignore table together with the index it was built with.

    Published as a unit: readers grab one snapshot reference and
    never see a table from one refresh next to names from another.
    """
    ignore_table: Dict[str, List[str]] = field(default_factory=dict)
    index: NameIdIndex = field(default_factory=NameIdIndex)


class IdentifierNormalizer:
    """Builds an IgnoreSnapshot from the raw module descriptor array."""

    def normalize(self, descriptors: List[Any]) -> IgnoreSnapshot:
        """
        Run both passes over the full descriptor array.

        Args:
            descriptors: Raw module descriptors as returned by the fetcher

        Returns:
            A fresh IgnoreSnapshot. Never merged with previous state.
        """
        modules = [d for d in descriptors if isinstance(d, dict)]
        if len(modules) != len(descriptors):
            logger.debug(f"Skipped {len(descriptors) - len(modules)} non-object feed entries")

        index = self.build_index(modules)
        ignore_table = self.build_ignore_table(modules, index)

        for module_id, ignored in ignore_table.items():
            logger.debug(f"{module_id} => {', '.join(ignored)}")
        logger.info(f"✓ Ignore lists built for {len(ignore_table)} modules ({len(index)} known IDs)")

        return IgnoreSnapshot(ignore_table=ignore_table, index=index)

    def build_index(self, modules: List[Dict[str, Any]]) -> NameIdIndex:
        """Pass 1: record name ↔ ID for every descriptor carrying both."""
        id_to_name: Dict[str, str] = {}
        name_to_id: Dict[str, str] = {}

        for module in modules:
            name = module.get(NAME_KEY)
            module_id = module.get(MODULE_ID_KEY)
            if isinstance(name, str) and isinstance(module_id, str):
                id_to_name[module_id] = name
                name_to_id[name] = module_id

        return NameIdIndex(id_to_name=id_to_name, name_to_id=name_to_id)

    def build_ignore_table(
        self,
        modules: List[Dict[str, Any]],
        index: NameIdIndex
    ) -> Dict[str, List[str]]:
        """Pass 2: ID-keyed table with every entry resolved to an ID."""
        table: Dict[str, List[str]] = {}

        for module in modules:
            name = module.get(NAME_KEY)
            if not isinstance(name, str):
                continue

            ignore_list = self.extract_ignore_list(module)
            if ignore_list is None:
                continue

            module_id = module.get(MODULE_ID_KEY)
            if not isinstance(module_id, str):
                logger.info(f"Failed to load ModuleID for {name}")
                continue

            table[module_id] = [index.name_to_id.get(entry, entry) for entry in ignore_list]

        return table

    @staticmethod
    def extract_ignore_list(module: Dict[str, Any]) -> Optional[List[str]]:
        """
        Pick the ignore list of a descriptor.

        Returns:
            The list if present and made of strings only, else None.
        """
        raw = module.get(IGNORE_PROCESSED_KEY)
        if raw is None:
            raw = module.get(IGNORE_KEY)
        if not isinstance(raw, list):
            return None
        if not all(isinstance(entry, str) for entry in raw):
            logger.debug(f"Ignoring malformed ignore list of {module.get(NAME_KEY)!r}")
            return None
        return list(raw)
