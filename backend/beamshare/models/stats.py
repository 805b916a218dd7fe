"""Server statistics: singleton counter row."""

from datetime import datetime

from sqlalchemy import DateTime, Integer
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from beamshare.models.base import Base

STATS_ROW_ID = 1


class ServerStats(Base):
    __tablename__ = "server_stats"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=STATS_ROW_ID)
    downloads: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    requests: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    uploads: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    start_time: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return (
            f"<ServerStats(downloads={self.downloads}, uploads={self.uploads}, "
            f"requests={self.requests})>"
        )
