"""
Common exceptions for P&ID Sync.
"""


class PidSyncError(Exception):
    """Base exception for all P&ID Sync errors."""
    pass


class ConfigurationError(PidSyncError):
    """Raised when there are configuration issues."""
    pass


class DatabaseError(PidSyncError):
    """Raised when database operations fail."""
    pass


class PersistenceError(PidSyncError):
    """Raised when a drawing cannot be saved or loaded."""
    pass


class GeometryError(PidSyncError):
    """Raised when a port or pipe cannot be resolved for a gesture."""
    pass


class ValidationError(PidSyncError):
    """Raised when data validation fails."""
    pass


class CatalogError(PidSyncError):
    """Raised when a drawing or shape cannot be found in its catalog."""
    pass


class ServiceError(PidSyncError):
    """Raised when service operations fail."""
    pass
