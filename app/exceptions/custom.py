from datetime import datetime


class BookingNotFoundError(Exception):
    def __init__(self, booking_id: int):
        self.booking_id = booking_id
        self.message = f"Booking {booking_id} not found"
        super().__init__(self.message)


class SuggestionNotFoundError(Exception):
    def __init__(self, suggestion_id: int):
        self.suggestion_id = suggestion_id
        self.message = f"Suggestion {suggestion_id} not found"
        super().__init__(self.message)


class InvalidStateError(Exception):
    def __init__(self, suggestion_id: int, status: str, message: str | None = None):
        self.suggestion_id = suggestion_id
        self.status = status
        self.message = message or f"Suggestion {suggestion_id} is {status}, expected pending"
        super().__init__(self.message)


class SuggestionExpiredError(Exception):
    def __init__(self, suggestion_id: int, expires_at: datetime):
        self.suggestion_id = suggestion_id
        self.expires_at = expires_at
        self.message = f"Suggestion {suggestion_id} expired at {expires_at.isoformat()}"
        super().__init__(self.message)


class StoreUnavailableError(Exception):
    def __init__(self, store: str, message: str):
        self.store = store
        self.message = message
        super().__init__(f"{store} unavailable: {message}")


class ActivitySinkError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)
