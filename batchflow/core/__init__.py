"""Core domain layer - entities, interfaces, services and exceptions."""

from batchflow.core import entities, exceptions, interfaces

__all__ = ["entities", "interfaces", "exceptions"]
