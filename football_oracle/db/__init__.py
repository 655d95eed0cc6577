"""Database models and utilities."""
from .models import (
    Base,
    Unit,
    UnitAuthor,
    Output,
    WitnessingOutput,
    HeadersCommissionOutput,
    DataFeed,
    FdResponse,
    get_engine,
    init_db,
    get_session_maker,
)

__all__ = [
    'Base',
    'Unit',
    'UnitAuthor',
    'Output',
    'WitnessingOutput',
    'HeadersCommissionOutput',
    'DataFeed',
    'FdResponse',
    'get_engine',
    'init_db',
    'get_session_maker',
]
