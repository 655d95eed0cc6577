"""
Exception types raised by the oracle.
"""


class OracleError(Exception):
    """Base class for all oracle errors."""


class ConfigError(OracleError):
    """Required configuration is missing or invalid."""


class MalformedFactError(OracleError):
    """A fact key or payload violates the publishing contract (e.g. empty key)."""


class StorageReadError(OracleError):
    """Reading ledger state from the database failed."""


class SubmissionError(OracleError):
    """Composing or broadcasting a ledger transaction failed."""


class InsufficientFundsError(SubmissionError):
    """The oracle address cannot pay for the transaction."""
