"""Domain-specific exceptions — framework-independent."""


class ValidationError(Exception):
    """Raised when an entity fails validation before it is persisted."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field} {message}")


class EntityNotFoundError(Exception):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


class DuplicateEntityError(Exception):
    """Raised when attempting to create a duplicate entity."""

    def __init__(self, entity_type: str, field: str, value: str):
        self.entity_type = entity_type
        self.field = field
        self.value = value
        super().__init__(f"{entity_type} with {field}='{value}' already exists")


class DuplicateRelationshipError(DuplicateEntityError):
    """Raised when an idempotent relationship insert loses a race it cannot recover from.

    The unique constraint rejected the insert, yet the winning row could not be
    read back (typically because a concurrent removal deleted it again).
    """

    def __init__(self, kind: str, article_id: int, user_id: int):
        self.kind = kind
        self.article_id = article_id
        self.user_id = user_id
        super().__init__(kind, "article_id/user_id", f"{article_id}/{user_id}")


class NotificationDeliveryError(Exception):
    """Raised when an outbound notification transport rejects a delivery.

    Transport-agnostic — works for the announce webhook and the per-user sink.
    """

    def __init__(self, channel: str, message: str, status_code: int | None = None):
        self.channel = channel
        self.status_code = status_code
        self.message = message
        prefix = f"[{channel}] {status_code}" if status_code is not None else f"[{channel}]"
        super().__init__(f"{prefix}: {message}")
