"""Exception hierarchy for ContractSathi.

Each error carries the HTTP status and machine-readable ``code`` it maps to,
so the API has a single handler for the whole hierarchy. ``expose`` decides
whether ``message`` reaches the client or is replaced by a generic one.
Model provider errors never reach clients: the pipeline turns them into
degraded results.
"""

from typing import Any


class ContractSathiError(Exception):
    status_code = 500
    code = "internal_error"
    expose = False

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


class NotFoundError(ContractSathiError):
    status_code = 404
    code = "not_found"
    expose = True

    def __init__(self, resource: str, identifier: str) -> None:
        super().__init__(
            message=f"{resource} not found",
            details={"resource": resource, "identifier": identifier},
        )


class ValidationError(ContractSathiError):
    """Rejected upload or payload."""

    status_code = 400
    code = "validation_error"
    expose = True


class FileTooLargeError(ValidationError):
    def __init__(self, max_size_mb: int) -> None:
        super().__init__(
            message=f"File is too large. Maximum size: {max_size_mb} MB",
            details={
                "max_size_mb": max_size_mb,
                "message_hi": f"फ़ाइल बहुत बड़ी है। अधिकतम आकार: {max_size_mb} MB",
            },
        )


class UnsupportedFileTypeError(ValidationError):
    def __init__(self, file_type: str, supported: list[str]) -> None:
        super().__init__(
            message=f"File type '{file_type}' is not supported. Please upload a PDF or DOCX file",
            details={
                "file_type": file_type,
                "supported_types": supported,
                "message_hi": "कृपया PDF या DOCX फ़ाइल अपलोड करें",
            },
        )


class ExternalServiceError(ContractSathiError):
    """A dependency outside the database failed."""


class AIServiceError(ExternalServiceError):
    pass


class AIRateLimitError(AIServiceError):
    pass


class AITimeoutError(AIServiceError):
    """The provider did not answer within ``AI_TIMEOUT_SECONDS``."""


class StorageError(ExternalServiceError):
    """Report upload or URL creation failed."""

    code = "storage_error"
    expose = True


class PersistenceError(ContractSathiError):
    """Analysis results could not be written; the contract is marked failed."""

    code = "persistence_error"
    expose = True


class ContractAlreadyAnalyzedError(ValidationError):
    """A completed contract is immutable; only its report may be regenerated."""

    status_code = 409
    code = "already_analyzed"

    def __init__(self, contract_id: str) -> None:
        super().__init__(
            message="Contract has already been analyzed",
            details={"contract_id": contract_id},
        )
