"""SQLAlchemy ORM models for beamshare."""

from beamshare.models.base import Base
from beamshare.models.starred import StarredFile
from beamshare.models.stats import STATS_ROW_ID, ServerStats

__all__ = [
    "Base",
    "STATS_ROW_ID",
    "ServerStats",
    "StarredFile",
]
