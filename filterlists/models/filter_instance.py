"""
FilterInstance model — one filter activated in one list, with its parameters.

Deduplicated by (filter_list_id, filter_name). Parameters are stored as JSON
text and decoded by the instance aggregator.
"""
from sqlalchemy import Column, Integer, Text, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func

from filterlists.database import Base


class FilterInstance(Base):
    __tablename__ = 'filter_instances'

    id = Column(Integer, primary_key=True, autoincrement=True)
    filter_list_id = Column(Integer, ForeignKey('filter_lists.id', ondelete='CASCADE'), nullable=False, index=True)
    user_id = Column(Text, nullable=False)
    filter_name = Column(Text, nullable=False)
    params = Column(Text, nullable=False, default='{}')
    test_mode = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint('filter_list_id', 'filter_name', name='uq_instance_list_filter'),
    )
