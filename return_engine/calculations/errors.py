"""
Calculation Errors

Exceptions raised by the calculation engine.
"""


class InvalidInputError(ValueError):
    """Raised when financial inputs are malformed or out of range."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")
