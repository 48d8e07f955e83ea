"""
FilterList model — one list per user, addressed externally by a rotatable token.
"""
from sqlalchemy import Column, Integer, Text, Boolean, DateTime
from sqlalchemy.sql import func

from filterlists.database import Base


class FilterList(Base):
    __tablename__ = 'filter_lists'

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Text, nullable=False, unique=True)
    token = Column(Text, nullable=False, unique=True)  # canonical UUID string
    downloaded = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    # Bumped by every instance mutation, feeds the list ETag
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
