"""
Shared enumerations for transaction groups.

Values are lowercase strings because they travel unchanged
between the API, the persistence layer and the bookkeeping
rules.
"""

import enum


class TransactionStatus(str, enum.Enum):
    """Lifecycle state of a transaction group."""
    DRAFT = "draft"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class FundingType(str, enum.Enum):
    """Where the value posted by a transaction group comes from."""
    ORIGINAL = "original"
    EXTENDED = "extended"
    TRANSFER = "transfer"
