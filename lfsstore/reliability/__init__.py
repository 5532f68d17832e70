"""
Reliability module: Bounded polling with exponential backoff.
"""

from lfsstore.reliability.retry import BackoffPolicy, PollStats, calculate_backoff, poll_until

__all__ = ["BackoffPolicy", "PollStats", "calculate_backoff", "poll_until"]
