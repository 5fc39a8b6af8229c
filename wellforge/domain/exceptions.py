# wellforge/domain/exceptions.py
class DomainException(Exception):
    """Base exception for all pipeline and domain errors."""
    pass

class MissingFileError(DomainException, FileNotFoundError):
    """Raised when an input file does not exist."""
    pass

class ParseError(DomainException):
    """Raised when file content cannot be parsed into consistent, typed columns."""
    pass

class DuplicateKeyError(DomainException):
    """Raised when a long-to-wide reshape would have to pick between two values for one cell."""
    pass

class NonUniqueJoinKeyError(DomainException):
    """Raised when the right-hand side of a join repeats a key value."""
    pass

class SchemaMismatchError(DomainException):
    """Raised when an expected column is absent or has the wrong kind of type."""
    pass

class SchemaNotFoundException(DomainException):
    """Raised when a requested schema does not exist."""
    pass

class InvalidDataException(DomainException):
    """Raised when data or configuration does not conform to the business rules."""
    pass
