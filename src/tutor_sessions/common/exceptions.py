"""
This file contains custom, application-specific exceptions.
"""

class ZoomIntegrationError(Exception):
    """Raised when a Zoom meeting cannot be created."""
    def __init__(self, message: str, status_code: int = 502, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details or {}

class WhatsAppSendError(Exception):
    """Raised when the WhatsApp Graph API rejects or never receives a message."""
    def __init__(self, error_body: str, status_code: int | None = None):
        super().__init__(error_body)
        self.error_body = error_body
        self.status_code = status_code

class EmailDeliveryError(Exception):
    """Raised when the email relay (or SMTP fallback) fails to send."""
    pass

class EmailNotConfiguredError(EmailDeliveryError):
    """Raised when neither Resend nor SMTP credentials are configured."""
    pass

class ReceiptValidationError(Exception):
    """Raised when an uploaded receipt is not an acceptable image."""
    pass

class StorageUploadError(Exception):
    """Raised when the object storage upload fails."""
    pass


def describe_database_error(message: str) -> tuple[int, str]:
    """
    Maps a raw database error message to an HTTP status and a friendlier text.
    Policy/permission failures usually mean a missing access rule on the table.
    """
    lowered = message.lower()
    if "policy" in lowered or "permission" in lowered:
        return 403, (
            "The database refused this operation. An access policy or grant for this "
            f"table is probably missing. Details: {message}"
        )
    if "unique" in lowered or "duplicate" in lowered or "foreign key" in lowered:
        return 409, f"The operation conflicts with existing data. Details: {message}"
    return 400, message
