"""
Database models for the ledger tables the oracle reads, plus its own request log.

The ledger tables are normally owned by the wallet; the models here mirror the
columns the oracle queries so a local database can be created for development
and tests.
"""
from sqlalchemy import (
    Column, String, Text, DateTime, Integer, BigInteger, ForeignKey, create_engine, func
)
from sqlalchemy.orm import declarative_base, sessionmaker
from datetime import datetime
import os

Base = declarative_base()


class Unit(Base):
    """A unit committed to the ledger."""

    __tablename__ = 'units'

    unit = Column(String(44), primary_key=True)
    is_stable = Column(Integer, nullable=False, default=0)
    creation_date = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Unit(unit='{self.unit}', is_stable={self.is_stable})>"


class UnitAuthor(Base):
    """Address that authored a unit."""

    __tablename__ = 'unit_authors'

    unit = Column(String(44), ForeignKey('units.unit'), primary_key=True)
    address = Column(String(32), primary_key=True, index=True)


class Output(Base):
    """Value-bearing output of a unit."""

    __tablename__ = 'outputs'

    output_id = Column(Integer, primary_key=True, autoincrement=True)
    unit = Column(String(44), ForeignKey('units.unit'), nullable=False, index=True)
    address = Column(String(32), nullable=False, index=True)
    amount = Column(BigInteger, nullable=False)
    asset = Column(String(44), nullable=True)
    is_spent = Column(Integer, nullable=False, default=0)


class WitnessingOutput(Base):
    """Accrued witnessing fee credit."""

    __tablename__ = 'witnessing_outputs'

    main_chain_index = Column(Integer, primary_key=True)
    address = Column(String(32), primary_key=True)
    amount = Column(BigInteger, nullable=False)
    is_spent = Column(Integer, nullable=False, default=0)


class HeadersCommissionOutput(Base):
    """Accrued headers commission credit."""

    __tablename__ = 'headers_commission_outputs'

    main_chain_index = Column(Integer, primary_key=True)
    address = Column(String(32), primary_key=True)
    amount = Column(BigInteger, nullable=False)
    is_spent = Column(Integer, nullable=False, default=0)


class DataFeed(Base):
    """A feed_name/value pair posted in a unit."""

    __tablename__ = 'data_feeds'

    unit = Column(String(44), ForeignKey('units.unit'), primary_key=True)
    message_index = Column(Integer, primary_key=True, default=0)
    feed_name = Column(String(64), primary_key=True, index=True)
    value = Column(String(64), nullable=True)
    int_value = Column(BigInteger, nullable=True)


class FdResponse(Base):
    """Raw football-data response recorded for each chat request."""

    __tablename__ = 'fd_responses'

    id = Column(Integer, primary_key=True, autoincrement=True)
    device_address = Column(String(33), nullable=False, index=True)
    feed_name = Column(String(64), nullable=False)
    response = Column(Text, nullable=True)
    creation_date = Column(DateTime, default=datetime.utcnow, server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<FdResponse(device_address='{self.device_address}', feed_name='{self.feed_name}')>"


# Database configuration
def get_database_url():
    """Get database URL from environment variables."""
    return os.getenv('DATABASE_URL', 'sqlite:///oracle.sqlite')


def get_engine(database_url=None):
    """Create an engine; SQLite connections may be used from worker threads."""
    url = database_url or get_database_url()
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, echo=False, pool_pre_ping=True, connect_args=connect_args)


def init_db(database_url=None):
    """Initialize database and create tables."""
    engine = get_engine(database_url)
    Base.metadata.create_all(engine)
    return engine


def get_session_maker(database_url=None):
    """Get SQLAlchemy session maker."""
    return sessionmaker(bind=get_engine(database_url))
