"""Database models."""
from .target import Target
from .observation import Observation
from .alert import Alert
from .recipient import Recipient

__all__ = ["Target", "Observation", "Alert", "Recipient"]
