# ==============================================
# TOPIC 2: FEED
# ==============================================
#
# Everything that talks to the remote module feed.
#
# Modules:
# --------
# - fetcher.py → HTTP GET + status/shape validation
#
# ==============================================

from .fetcher import FeedFetcher

__all__ = ["FeedFetcher"]
