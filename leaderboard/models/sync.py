"""
Sync model — one row per ingestion run.

Written before any snapshot row that references its sync_id; never updated.
"""
from sqlalchemy import Column, Text, DateTime
from sqlalchemy.sql import func

from leaderboard.database import Base


class Sync(Base):
    __tablename__ = 'Sync'

    sync_id = Column(Text, primary_key=True)
    sync_date = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
