"""Utility modules for euclidbot."""

from euclidbot.utils.retry import RateLimitedExecutor, is_rate_limited

__all__ = ["RateLimitedExecutor", "is_rate_limited"]
