# ==============================================
# TOPIC 3: NORMALIZATION
# ==============================================
#
# Resolves the mixed name / ID identifier space of the feed
# into an ID-only ignore table.
#
# Modules:
# --------
# - identifier_normalizer.py → NameIdIndex, IgnoreSnapshot, IdentifierNormalizer
#
# ==============================================

from .identifier_normalizer import IdentifierNormalizer, IgnoreSnapshot, NameIdIndex

__all__ = ["IdentifierNormalizer", "IgnoreSnapshot", "NameIdIndex"]
