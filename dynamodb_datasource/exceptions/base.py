from typing import Any, Dict, Optional


class DatasourceError(Exception):
    """Root of every error raised by the datasource.

    ``message`` says what went wrong. ``context`` carries the structured
    details behind it: the field, table, operation, primary key or service
    error code involved. Each layer adds what it knows on the way up (the
    schema knows the field, the gateway knows the table and operation), so
    the same error ends up describing where it happened without every raise
    site having to know all of it.

    Attributes:
        message: Human-readable error message
        original_error: The exception this one was raised from, if any
        context: Details about where the error happened
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error
        self.context = {k: v for k, v in (context or {}).items() if v is not None}

    def add_context(self, **details: Any) -> "DatasourceError":
        """Record details not already present and return the error itself.

        Details set closer to the failure win; None values are ignored.
        """
        for key, value in details.items():
            if value is not None:
                self.context.setdefault(key, value)
        return self

    @property
    def table_name(self) -> Optional[str]:
        return self.context.get('table_name')

    @property
    def operation(self) -> Optional[str]:
        return self.context.get('operation')

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = "; ".join(f"{key}={value}" for key, value in self.context.items())
        return f"{self.message} [{details}]"
