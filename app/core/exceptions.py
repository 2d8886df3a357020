class AuthorizationError(Exception):
    """Raised when the current admin may not perform an action."""

    def __init__(self, detail: str = "Insufficient permissions"):
        super().__init__(detail)
        self.detail = detail


class ScopeError(AuthorizationError):
    """Raised when no row scope can be derived for an admin."""
