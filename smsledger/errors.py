"""
Exceptions raised on the ingestion write path.

Authentication failures and requests without Twilio headers are expected
outcomes and are answered directly by the handler; only the failures below
are exceptional.
"""


class SmsLedgerError(Exception):
    """Base class for all smsledger errors."""


class IdentityDerivationError(SmsLedgerError):
    """The Argon2 request identity could not be computed."""


class StorageWriteError(SmsLedgerError):
    """The audit + sms transaction did not commit."""


class SchemaInitializationError(SmsLedgerError):
    """The message store tables could not be created at startup."""
