class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class SchedulerError(AppError):
    """Raised when the scheduler encounters a logical error or invalid state."""
    def __init__(self, message: str, details: dict = None, status_code: int = 400):
        super().__init__(message, status_code=status_code, details=details)

class CapacityOverrunError(SchedulerError):
    """Raised when the session catalog does not fit into the open cells of the grid."""
    def __init__(self, dropped_count: int, details: dict = None):
        self.dropped_count = dropped_count
        payload = {"dropped_count": dropped_count, **(details or {})}
        super().__init__(
            f"{dropped_count} session(s) could not be placed on the weekly grid",
            details=payload,
            status_code=422,
        )

class ScheduleConflictError(SchedulerError):
    """Raised when a placed schedule fails conflict validation."""
    def __init__(self, conflicts: list[str]):
        self.conflicts = list(conflicts)
        super().__init__(
            f"Allocation produced {len(self.conflicts)} conflict(s)",
            details={"conflicts": self.conflicts},
            status_code=409,
        )

class ExternalSourceError(AppError):
    """Raised when the external text source fails or yields an unusable table."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=502, details=details)

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(f"{resource_type} with id {resource_id} not found", status_code=404)

class ConfigurationError(AppError):
    """Raised when system configuration is invalid."""
    def __init__(self, message: str):
        super().__init__(message, status_code=500)
