"""
SQLAlchemy Models for the Farm Inventory

Only the two tables the inventory engine reads and the sale side channel
writes: batches and egg production records.
"""

from datetime import datetime
from typing import Any, Dict

from sqlalchemy import (
    Boolean, Column, Date, DateTime, ForeignKey, Index, Integer, Numeric, String,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class BatchRow(Base):
    """A batch of birds (laying, growing or fattening)."""
    __tablename__ = "batches"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    category = Column(String(20), nullable=False)  # laying / growing / fattening
    status = Column(String(20), nullable=False, default="active")

    # Head counts
    head_count = Column(Integer, nullable=True)
    initial_count = Column(Integer, nullable=True)

    breed = Column(String(120), nullable=True)
    start_date = Column(Date, nullable=True)
    birth_date = Column(Date, nullable=True)
    average_weight = Column(Numeric(10, 3), nullable=True)  # pounds

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    production = relationship(
        "ProductionRow", back_populates="batch", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_batches_category_status", "category", "status"),
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "status": self.status,
            "head_count": self.head_count,
            "initial_count": self.initial_count,
            "breed": self.breed,
            "start_date": self.start_date,
            "birth_date": self.birth_date,
            "average_weight": self.average_weight,
            "created_at": self.created_at,
        }


class ProductionRow(Base):
    """Eggs collected from a laying batch, by size tier."""
    __tablename__ = "production_records"

    id = Column(String(64), primary_key=True)
    batch_id = Column(String(64), ForeignKey("batches.id"), nullable=False)
    collected_at = Column(DateTime, nullable=False)

    # Size tiers
    small = Column(Integer, default=0)
    medium = Column(Integer, default=0)
    large = Column(Integer, default=0)
    extra_large = Column(Integer, default=0)

    # Sale tracking
    sold = Column(Integer, default=0)
    consumed = Column(Boolean, default=False, nullable=False)

    batch = relationship("BatchRow", back_populates="production")

    __table_args__ = (
        Index("ix_production_batch_consumed", "batch_id", "consumed"),
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "batch_id": self.batch_id,
            "collected_at": self.collected_at,
            "small": self.small,
            "medium": self.medium,
            "large": self.large,
            "extra_large": self.extra_large,
            "sold": self.sold,
            "consumed": self.consumed,
        }
