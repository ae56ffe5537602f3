"""Infrastructure layer implementations."""

from batchflow.infrastructure import storage

__all__ = ["storage"]
