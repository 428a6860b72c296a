"""SQLAlchemy models package."""

from .loyalty import LoyaltyAccount, LoyaltyEventRecord  # noqa: F401
