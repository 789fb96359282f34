# Copyright 2025 API Change Ledger contributors
# License AGPL-3.0 or later (http://www.gnu.org/licenses/agpl)


class LedgerError(Exception):
    """Base class for ingestion and persistence failures."""


class DescriptorError(LedgerError):
    """A change descriptor could not be fetched or does not parse."""


class InvalidEntryError(LedgerError):
    """A raw change entry is missing a required field or holds an unknown value."""


class LedgerStoreError(LedgerError):
    """The persisted ledger document is missing or unreadable."""


class SyncError(LedgerError):
    """The monitor repository could not be cloned or pulled."""
