from sqlalchemy import (
    Column,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class StoredRecord(Base):
    """Body of one record. ``internal_id`` is unique within ``record_type``."""
    __tablename__ = "records"

    row_id = Column(Integer, primary_key=True, autoincrement=True)
    record_type = Column(String, nullable=False, index=True)
    internal_id = Column(Integer, nullable=False)
    fields_json = Column(Text, nullable=False, default="{}")  # {fieldId: value}; subrecords are nested objects
    sublist_ids_json = Column(Text, nullable=True)  # JSON array, lets a sublist exist with zero lines
    created_at_utc = Column(String, nullable=True)  # ISO 8601

    __table_args__ = (
        UniqueConstraint("record_type", "internal_id", name="uq_records_type_internal_id"),
    )


class StoredSublistLine(Base):
    __tablename__ = "sublist_lines"

    line_row_id = Column(Integer, primary_key=True, autoincrement=True)
    record_type = Column(String, nullable=False)
    internal_id = Column(Integer, nullable=False)
    sublist_id = Column(String, nullable=False)
    line_index = Column(Integer, nullable=False)
    values_json = Column(Text, nullable=False, default="{}")

    __table_args__ = (
        Index("idx_sublist_lines_record", "record_type", "internal_id", "sublist_id", "line_index"),
    )


def create_all(engine: Engine) -> None:
    """Create missing tables on an existing engine; existing tables are left alone."""
    Base.metadata.create_all(engine)
