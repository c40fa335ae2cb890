"""High-level clients."""

from .client import Client, Subscribable

__all__ = ["Client", "Subscribable"]
