"""Error taxonomy for case workflow operations."""


class CaseServiceError(Exception):
    """Base exception for case workflow errors."""

    status_code = 500

    def __init__(self, message: str, error_type: str = "case_service_error"):
        self.message = message
        self.error_type = error_type
        super().__init__(message)

    def to_dict(self):
        return {'error': self.message, 'error_type': self.error_type}


class InvalidInputError(CaseServiceError):
    """Raised when a required field is missing or malformed."""

    status_code = 400

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message, "invalid_input")
        self.field = field


class NotFoundError(CaseServiceError):
    """Raised when a referenced case, user, participation or evidence is missing."""

    status_code = 404

    def __init__(self, kind: str, key):
        super().__init__(f"{kind} {key} not found", f"{kind}_not_found")
        self.kind = kind
        self.key = key


class ConflictError(CaseServiceError):
    """Raised when a workflow guard is violated."""

    status_code = 409

    def __init__(self, message: str, guard: str):
        super().__init__(message, "conflict")
        self.guard = guard

    def to_dict(self):
        payload = super().to_dict()
        payload['guard'] = self.guard
        return payload


class StorageFailureError(CaseServiceError):
    """Raised when a transaction could not be committed. Nothing was applied."""

    def __init__(self, operation: str):
        super().__init__(f"Storage failure during {operation}", "storage_failure")
        self.operation = operation
