# ==============================================
# UTILITIES
# ==============================================
#
# Host-side helpers that the library modules never call.
#
# Modules:
# --------
# - logger.py → setup_logging() for the CLI (console + rotating file)
#
# ==============================================

from .logger import setup_logging

__all__ = ["setup_logging"]
