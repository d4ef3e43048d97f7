class PayTrackError(Exception):
    """Base class for errors raised by the payment tracking core."""


class ValidationError(PayTrackError):
    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class NotFoundError(PayTrackError):
    def __init__(self, entity: str, key):
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.key = key


class StoreUnavailableError(PayTrackError):
    """The backing database could not be reached or is misconfigured."""
