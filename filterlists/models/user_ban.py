"""
UserBan model — read side of the ban registry.

A user is banned while a row with lifted_at IS NULL exists.
"""
from sqlalchemy import Column, Integer, Text, DateTime
from sqlalchemy.sql import func

from filterlists.database import Base


class UserBan(Base):
    __tablename__ = 'user_bans'

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Text, nullable=False, index=True)
    reason = Column(Text, default='')
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    lifted_at = Column(DateTime(timezone=True), nullable=True)
