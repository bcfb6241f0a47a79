"""Domain models for subregistry."""

from subregistry.models.subscription import Subscription

__all__ = ["Subscription"]
