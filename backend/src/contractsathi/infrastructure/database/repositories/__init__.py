"""Repository pattern implementations for database access."""

from contractsathi.infrastructure.database.repositories.base import BaseRepository
from contractsathi.infrastructure.database.repositories.contract import (
    ClauseRepository,
    ContractRepository,
)
from contractsathi.infrastructure.database.repositories.report import ReportRepository
from contractsathi.infrastructure.database.repositories.user import (
    ChatQueryRepository,
    UserRepository,
)

__all__ = [
    "BaseRepository",
    "ChatQueryRepository",
    "ClauseRepository",
    "ContractRepository",
    "ReportRepository",
    "UserRepository",
]
