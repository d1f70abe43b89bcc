"""Typed exceptions for stored-procedure access."""


class DirectorioError(Exception):
    """Base exception for all directory gateway operations."""
    pass


class ConfigurationError(DirectorioError):
    """Database or procedure configuration is missing or malformed."""
    pass


class InvalidProcedureNameError(DirectorioError):
    """Procedure name contains characters that cannot be safely interpolated."""
    pass


class ProcedureError(DirectorioError):
    """Stored procedure call failed.
    
    Attributes:
        procedure: Name of the stored procedure
        message: Error message from the driver
    """
    
    def __init__(self, procedure: str, message: str):
        self.procedure = procedure
        self.message = message
        super().__init__(f"{procedure}: {message}")
