"""Exception classes for AVX Sight."""


class AVXSightError(Exception):
    """Base exception for all avx-sight errors."""
    pass


class AccessDeniedError(AVXSightError):
    """Raised when folder access was declined, revoked or could not begin.

    A denial is never fatal to a scan; it degrades the affected root to an
    empty contribution.
    """

    def __init__(self, path: str, reason: str | None = None, cancelled: bool = False):
        self.path = str(path)
        self.reason = reason
        self.cancelled = cancelled
        message = f"Access denied for {self.path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class DirectoryReadError(AVXSightError):
    """Raised when listing a plugin directory fails for a reason other than absence."""

    def __init__(self, path: str, cause: BaseException):
        self.path = str(path)
        self.cause = cause
        super().__init__(f"Failed to read directory {self.path}: {cause}")


class GrantStoreError(AVXSightError):
    """Raised when the persisted grant store cannot be written."""
    pass


class ConfigError(AVXSightError):
    """Raised when a scan configuration is invalid."""
    pass


class BundleNotFoundError(AVXSightError):
    """Raised when a requested plugin bundle does not exist."""
    pass


class UnrecognizedBundleError(AVXSightError):
    """Raised when a path is not a recognized plugin bundle."""
    pass
