"""RecallForge - Spaced repetition scheduling and retention analytics.

This package provides the review-scheduling core (SM-2 variant), retention
estimation, mastery aggregation, and the storage and CLI layers around them.
"""

__version__ = "0.3.0"
__all__ = ["__version__"]
