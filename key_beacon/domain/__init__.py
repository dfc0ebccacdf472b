"""Pure domain pieces: key resolution, the region table, per-region outcomes.

Nothing here knows about FastAPI or httpx, so it can be unit-tested directly.
"""
__all__ = ["keys", "regions", "outcomes"]
