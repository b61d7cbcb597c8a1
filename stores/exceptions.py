"""
Shared exception definitions for all stores.

Hierarchy:
- StoreError (base for all store exceptions)
  - RoundStoreError (round state persistence errors)
  - SchedulerStoreError (queue / session persistence errors)
  - StateCorrupted (persisted record cannot be turned back into domain state)
  - UnexpectedResult
"""


# =========================
# Base exception
# =========================

class StoreError(Exception):
    """Base exception for all store-related errors."""
    retryable: bool = True


class StateCorrupted(StoreError):
    retryable = False


class UnexpectedResult(StoreError):
    retryable = True
    #aka, the "how the heck did this happen" exception, such as scenarios that can only occur by breaking ACID


# =========================
# RoundStore exceptions
# =========================

class RoundStoreError(StoreError):
    """Base exception for round state store errors."""
    retryable = True


# =========================
# SchedulerStore exceptions
# =========================

class SchedulerStoreError(StoreError):
    """Base exception for scheduler store errors."""
    retryable = True
