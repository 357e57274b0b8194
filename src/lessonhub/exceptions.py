"""lessonhub exceptions."""


class StoreError(Exception):
    """Raised when the document store rejects or fails an operation."""


class StoreNotConfiguredError(StoreError):
    """Raised when a request needs the store but none was set up."""

    def __init__(self) -> None:
        super().__init__("Document store not initialized. Check DATABASE_URL or DB_PROPERTIES.")
