# ==============================================
# IgnoreLookup
# ==============================================
#
# PURPOSE:
#   Answer "what does module X ignore?" for a display name or an ID.
#
# RESOLUTION ORDER:
#   1. exact display name           → its ID
#   2. display name with the other  → its ID
#      apostrophe glyph (' ↔ ’)
#   3. otherwise                    → input is taken as an ID
#
#   Unknown ID → None. Lookups never raise.
#
# RESULTS:
#   Always a new list. With want_ids=False each ID is mapped to its
#   display name; IDs without a known name are returned as-is.
#
# ==============================================

import logging
from typing import List, Optional

from boss_module_manager.normalization.identifier_normalizer import IgnoreSnapshot
from boss_module_manager.refresh.orchestrator import IgnoreState

logger = logging.getLogger(__name__)

ASCII_APOSTROPHE = "'"
TYPOGRAPHIC_APOSTROPHE = "’"


def swap_apostrophes(identifier: str) -> str:
    """Replace ' with ’ if the input has any, otherwise ’ with '."""
    if ASCII_APOSTROPHE in identifier:
        return identifier.replace(ASCII_APOSTROPHE, TYPOGRAPHIC_APOSTROPHE)
    return identifier.replace(TYPOGRAPHIC_APOSTROPHE, ASCII_APOSTROPHE)


class IgnoreLookup:
    def __init__(self, ignore_state: IgnoreState):
        self._ignore_state = ignore_state

    def resolve_ignore_list(self, identifier: str, want_ids: bool) -> Optional[List[str]]:
        """
        Look up the ignore list of a module.

        Args:
            identifier: Display name or module ID
            want_ids: Return module IDs if True, display names otherwise

        Returns:
            A new list, or None if the module has no known ignore list.
        """
        # One read: the whole call works against a single snapshot.
        snapshot = self._ignore_state.snapshot

        module_id = self.resolve_id(identifier, snapshot)
        ignored = snapshot.ignore_table.get(module_id)
        if ignored is None:
            logger.debug(f"Request for {identifier}’s ignore list failed (resolved to {module_id!r})")
            return None

        logger.debug(f"Request for {identifier}’s ignore list successful")
        if want_ids:
            return list(ignored)

        id_to_name = snapshot.index.id_to_name
        return [id_to_name.get(entry, entry) for entry in ignored]

    @staticmethod
    def resolve_id(identifier: str, snapshot: IgnoreSnapshot) -> str:
        """Map a display name (either apostrophe glyph) to its ID, else return it unchanged."""
        name_to_id = snapshot.index.name_to_id

        if identifier in name_to_id:
            return name_to_id[identifier]

        alternate = swap_apostrophes(identifier)
        if alternate in name_to_id:
            return name_to_id[alternate]

        return identifier
