from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, func, text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    message = Column(Text, nullable=True)

    # JSON text: ["<url>", ...]
    photos = Column(Text, nullable=True)

    location = Column(String(500), nullable=True)
    date = Column(DateTime, nullable=True)

    # JSON text: [{"url": ..., "position": ...}, ...] (additive column)
    custom_images = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.current_timestamp(), nullable=False)


class Guest(Base):
    __tablename__ = "guests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=True)
    name = Column(String(255), nullable=False)
    token = Column(String(255), unique=True, index=True, nullable=False)

    # pending: (false, 0) / confirmed: (true, 1..10) / declined: (false, -1)
    confirmed = Column(Boolean, server_default=text("0"), nullable=False)
    num_people = Column(Integer, server_default=text("0"), nullable=False)

    created_at = Column(DateTime, server_default=func.current_timestamp(), nullable=False)
