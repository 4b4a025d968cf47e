"""RenewalStatus enum for registration urgency levels."""

from enum import Enum


class RenewalStatus(Enum):
    """Registration status categories. Lower value = more urgent."""

    EXPIRED = 1
    DUE_SOON = 2
    VALID = 3
    UNKNOWN = 4  # Can't calculate (date outside the calendar table)
