# ==============================================
# TOPIC 5: LOOKUP
# ==============================================
#
# Modules:
# --------
# - ignore_lookup.py → IgnoreLookup, apostrophe-variant resolution
#
# ==============================================

from .ignore_lookup import IgnoreLookup, swap_apostrophes

__all__ = ["IgnoreLookup", "swap_apostrophes"]
