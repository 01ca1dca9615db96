# ==============================================
# TOPIC 4: REFRESH
# ==============================================
#
# Modules:
# --------
# - orchestrator.py → IgnoreState, RefreshOrchestrator, RefreshState, RefreshResult
#
# ==============================================

from .orchestrator import IgnoreState, RefreshOrchestrator, RefreshResult, RefreshState

__all__ = ["IgnoreState", "RefreshOrchestrator", "RefreshResult", "RefreshState"]
