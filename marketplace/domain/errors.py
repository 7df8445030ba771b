# marketplace/domain/errors.py
from typing import Any


class AppError(Exception):
    """
    Bazowy blad aplikacji.
    Serwisy rzucaja bledy z tej hierarchii, warstwa api zamienia je
    na koperte {success: false, error, details?} z odpowiednim kodem HTTP.
    """

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Validation failed"


class AuthenticationError(AppError):
    status_code = 401
    default_message = "Authentication required"


class AuthorizationError(AppError):
    status_code = 403
    default_message = "Insufficient permissions"


class NotFoundError(AppError):
    status_code = 404

    def __init__(self, resource: str = "Resource", details: Any = None):
        super().__init__(f"{resource} not found", details)


class ConflictError(AppError):
    status_code = 409
    default_message = "Conflict"


class NotAvailableError(ConflictError):
    """Oferta nie istnieje, jest nieaktywna, niezatwierdzona albo brakuje stanu."""

    def __init__(self, listing_id: int, reason: str):
        self.listing_id = listing_id
        self.reason = reason
        super().__init__(
            f"Provider set {listing_id} is not available: {reason}",
            details={"provider_set_id": listing_id, "reason": reason},
        )


class ProviderMismatchError(ValidationError):
    def __init__(self, listing_id: int, provider_id: int):
        self.listing_id = listing_id
        super().__init__(
            "Provider set does not belong to specified provider",
            details={"provider_set_id": listing_id, "provider_id": provider_id},
        )


class StorageError(AppError):
    status_code = 500
    default_message = "Storage failure"


class OrderNumberConflict(StorageError):
    """Naruszenie unikalnosci order_number przy insercie, ponawiane raz, potem 500."""

    default_message = "Could not allocate a unique order number"
