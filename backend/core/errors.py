"""Error taxonomy for the schema explorer. `kind` is the stable, client-facing tag."""


class ConfigError(ValueError):
    """Configuration is missing or invalid."""


class ExplorerError(Exception):
    kind = "explorer_error"
    status_code = 500

    def __init__(self, detail: str = ""):
        super().__init__(detail)
        self.detail = detail


class Unauthenticated(ExplorerError):
    """No session, or the session token was rejected."""
    kind = "unauthenticated"
    status_code = 401


class NotFound(ExplorerError):
    """Unknown table or row."""
    kind = "not_found"
    status_code = 404


class InvalidIdentifier(ExplorerError):
    """Table or column name is not in the live catalog snapshot."""
    kind = "invalid_identifier"
    status_code = 400


class ValidationError(ExplorerError):
    """Malformed pagination or sort parameters."""
    kind = "validation_error"
    status_code = 400


class StoreError(ExplorerError):
    """The record store failed; the original exception is chained as __cause__."""
    kind = "store_error"
    status_code = 500


class MaintenanceError(ExplorerError):
    """Background cleanup failed. Logged by the caller, never surfaced."""
    kind = "maintenance_error"
