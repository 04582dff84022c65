"""Domain exceptions shared by services, routers and proxy functions."""


class WineryInUse(Exception):
    """Raised when deleting a winery that wines still reference."""

    def __init__(self, count: int):
        self.count = count
        super().__init__(f"Winery has {count} wine{'s' if count != 1 else ''}")


class InsufficientStock(Exception):
    """Raised when a stock movement would drive a wine's quantity below zero."""

    def __init__(self, current: int, requested: int):
        self.current = current
        self.requested = requested
        super().__init__(
            f"Insufficient stock: {current} bottle(s) available, change of {requested} requested"
        )


class NothingToEnrich(Exception):
    """Raised when enrichment has no empty field to fill or nothing to change."""


class AIConfigError(Exception):
    """Raised when the LLM provider is not configured."""


class AIResponseError(Exception):
    """Raised when the LLM answer cannot be parsed."""
