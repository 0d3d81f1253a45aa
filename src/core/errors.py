"""
Exception taxonomy for invoice generation.
"""


class InvoiceError(Exception):
    """Base class for all invoice generator errors."""


class SourceFetchError(InvoiceError):
    """A remote or local commit source could not be read."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"{source}: {reason}")


class AIStageError(InvoiceError):
    """The external text-generation service failed."""


class ConfigurationError(InvoiceError):
    """An invoice configuration is missing, malformed, or unsupported."""


class DeliveryError(InvoiceError):
    """An invoice email could not be delivered."""


class StorageError(InvoiceError):
    """A saved-invoice store operation failed."""


class InvoiceNotFoundError(StorageError):
    """No saved invoice exists with the requested id."""

    def __init__(self, invoice_id: str):
        self.invoice_id = invoice_id
        super().__init__(f"Invoice not found: {invoice_id}")
