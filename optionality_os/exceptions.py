"""
Custom exception classes for Optionality OS.

Answer problems never surface here: the scoring engine degrades to neutral
weights instead. These cover configuration mistakes and the service boundary.
"""


class OptionalityException(Exception):
    """Base exception for all Optionality OS errors."""
    status_code = 500

    def __init__(self, message: str, error_code: str = None):
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)


class ConfigurationException(OptionalityException):
    """Raised when a rule set or mapping table is declared inconsistently."""
    pass


class UnknownRuleSetException(OptionalityException):
    """Raised when a caller asks for a rule set that is not registered."""
    status_code = 404


class RecordNotFoundException(OptionalityException):
    """Raised when a stored assessment or portfolio option does not exist."""
    status_code = 404


class VaultFormatException(OptionalityException):
    """Raised when an imported key-value vault cannot be parsed."""
    status_code = 400


class DatabaseException(OptionalityException):
    """Raised for database-related errors."""
    pass


class AssessmentConflictException(OptionalityException):
    """Raised when a save would replace a stored assessment of another rule set."""
    status_code = 409
