"""SQLAlchemy table definitions."""

from __future__ import annotations

import uuid

from sqlalchemy import (
    Column,
    DateTime,
    Engine,
    Float,
    Integer,
    String,
    Text,
    JSON,
    create_engine,
)
from sqlalchemy.orm import DeclarativeBase


def new_document_id() -> str:
    return uuid.uuid4().hex


class Base(DeclarativeBase):
    pass


class ListingRow(Base):
    __tablename__ = "listings"

    # pk preserves insertion order; doc_id is the opaque id handed out
    pk = Column(Integer, primary_key=True, autoincrement=True)
    doc_id = Column(String(32), nullable=False, unique=True, default=new_document_id)
    name = Column(String(255), nullable=False)
    address = Column(String(255), nullable=False)
    property_type = Column(String(100), nullable=False)
    location = Column(String(255), nullable=False, index=True)
    price = Column(Float, nullable=False, index=True)
    bedrooms = Column(Float, default=0)
    bathrooms = Column(Float, default=0)
    square_footage = Column(Float, default=0)
    amenities = Column(JSON, default=list)
    unique_features = Column(JSON, default=list)
    description = Column(Text, default="")
    image_url = Column(Text, default="")
    date_added = Column(DateTime, nullable=False, index=True)


class BookingRow(Base):
    __tablename__ = "bookings"

    pk = Column(Integer, primary_key=True, autoincrement=True)
    doc_id = Column(String(32), nullable=False, unique=True, default=new_document_id)
    property_id = Column(String(32), nullable=False, index=True)
    property_name = Column(String(255), nullable=False)
    user_name = Column(String(255), nullable=False)
    user_phone = Column(String(50), nullable=False)
    booking_date = Column(DateTime, nullable=False, index=True)


def init_db(db_url: str = "sqlite:///adilla.db", echo: bool = False) -> Engine:
    """Create the engine and any missing tables."""
    engine = create_engine(db_url, echo=echo)
    Base.metadata.create_all(engine)
    return engine
