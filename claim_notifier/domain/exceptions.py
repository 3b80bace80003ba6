"""Domain error hierarchy shared by use cases and delivery adapters."""


class DomainError(Exception):
    """Base for all domain errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotFoundError(DomainError, LookupError):
    """Entity not found (maps to 404)."""

    def __init__(self, entity: str, identifier: object) -> None:
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} '{identifier}' not found")


class NoDataError(DomainError):
    """The content generator found nothing worth reporting for a window."""


class DeliveryError(DomainError):
    """A delivery channel could not hand the notification over."""

    def __init__(self, channel: str, message: str) -> None:
        self.channel = channel
        super().__init__(f"{channel}: {message}")


__all__ = ["DeliveryError", "DomainError", "NoDataError", "NotFoundError"]
