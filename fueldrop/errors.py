"""
Error taxonomy. Services raise these; the handler boundary in fueldrop.main turns
each into {"success": false, "message": ...} with the class's status code.
"""


class FuelDropError(Exception):
    status_code = 500
    default_message = "Request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthorized(FuelDropError):
    status_code = 401
    default_message = "Unauthorized: Please log in."


class Forbidden(FuelDropError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(FuelDropError):
    status_code = 404
    default_message = "Not found"


class PriceNotFound(NotFound):
    default_message = "Price information not found for selected station and fuel type"


class InvalidState(FuelDropError):
    """Transition predicate failed although the order exists and is the caller's."""
    status_code = 409

    def __init__(self, current_status: str, message: str | None = None):
        self.current_status = current_status
        super().__init__(message or f"Order cannot be changed at this status (current status: {current_status})")


class ValidationError(FuelDropError):
    status_code = 400
    default_message = "Invalid request"


class InvalidStatusTarget(ValidationError):
    default_message = "Invalid status update"


class StoreError(FuelDropError):
    """Persistence failure. The message is generic; details go to the log only."""
    status_code = 500
    default_message = "Internal server error"
