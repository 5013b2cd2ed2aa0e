"""
LeaderboardEntry model — the real-named snapshot table (XBLTotal).

One row per (player, sync). Generic-named tables (field1..field13) hold the
same logical record but are not mapped; the query services discover them.
"""
from sqlalchemy import Column, Integer, Text, Index

from leaderboard.database import Base

# Capture/ingestion instants are canonical text so hour buckets are string prefixes
INSTANT_FORMAT = '%Y-%m-%d %H:%M:%S'


class LeaderboardEntry(Base):
    __tablename__ = 'XBLTotal'

    id = Column(Integer, primary_key=True, autoincrement=True)
    leaderboard_id = Column(Integer, nullable=True)
    rank = Column(Integer, default=0)
    name = Column(Text, nullable=True)
    first_place_finishes = Column(Integer, default=0)
    second_place_finishes = Column(Integer, default=0)
    third_place_finishes = Column(Integer, default=0)
    races_completed = Column(Integer, default=0)
    kudos_rank = Column(Integer, default=0)
    kudos = Column(Integer, default=0)
    folder_date = Column(Text, nullable=True)   # capture batch instant
    data_date = Column(Text, nullable=True)     # row write instant
    sync_id = Column(Text, nullable=True)

    __table_args__ = (
        Index('ix_xbltotal_folder_date', 'folder_date'),
        Index('ix_xbltotal_sync_id', 'sync_id'),
    )
