"""Persistence layer: repository contract plus in-memory and SQL implementations."""

from learning_lab.repositories.base import Repository
from learning_lab.repositories.memory import MemoryRepository
from learning_lab.repositories.sql import SqlRepository

__all__ = ["Repository", "MemoryRepository", "SqlRepository"]
