from __future__ import annotations


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules.

    ``code`` is a stable reason code for API clients; the message is meant
    for end users.
    """

    def __init__(self, message: str, *, code: str = "invalid-input"):
        super().__init__(message)
        self.code = code


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class UntrustedPunch(ValidationError):
    """Raised in strict mode when a punch fails the trust check."""

    def __init__(self, message: str = "Chấm công từ mạng/vị trí không được phép"):
        super().__init__(message, code="untrusted-punch")


class InvalidQRToken(ValidationError):
    def __init__(self, message: str = "Mã QR không hợp lệ hoặc hết hạn!"):
        super().__init__(message, code="invalid-qr-token")


class StateConflictError(DomainError):
    """Expected outcome of an illegal transition; the caller can recover."""

    code = "state-conflict"


class AlreadyCheckedIn(StateConflictError):
    code = "already-checked-in"

    def __init__(self, message: str = "Bạn đã chấm công vào ca hôm nay rồi"):
        super().__init__(message)


class NotCheckedInYet(StateConflictError):
    code = "not-checked-in-yet"

    def __init__(self, message: str = "Bạn chưa chấm công vào ca hôm nay"):
        super().__init__(message)


class AlreadyCheckedOut(StateConflictError):
    code = "already-checked-out"

    def __init__(self, message: str = "Bạn đã chấm công tan ca rồi"):
        super().__init__(message)


class AlreadyResolved(StateConflictError):
    code = "already-resolved"

    def __init__(self, message: str = "Yêu cầu đã được xử lý"):
        super().__init__(message)


class TransientError(Exception):
    """Infrastructure failure; retrying the same request is safe."""


class StoreUnavailable(TransientError):
    pass


class RegistryUnavailable(TransientError):
    pass


class DataIntegrityError(Exception):
    """A stored record violates an invariant (e.g. check-out before check-in)."""

    def __init__(self, message: str, *, attendance_id: int | None = None):
        super().__init__(message)
        self.attendance_id = attendance_id


class DuplicateRecord(Exception):
    """Raised by a store when a uniqueness constraint rejects a write."""


class StaleRecord(TransientError):
    """The record changed between read and write; retrying is safe."""
