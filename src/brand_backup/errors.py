"""Exception types for brand backup and restore.

Fatal errors abort the call before (or instead of) writing anything.
Row-level failures are not exceptions -- they are collected as
``RowError`` records in the ``ImportReport``
(see ``brand_backup.backup.models``).

Usage:
    from brand_backup.errors import AuthError, TableReadError, ValidationError
"""


class BrandBackupError(Exception):
    """Base class for all brand backup errors."""

    pass


class AuthError(BrandBackupError):
    """Raised when the caller is missing, unknown, or not allowed.

    ``status_code`` is 401 for a missing or invalid credential and 403
    when the caller is known but their role is not permitted.
    """

    def __init__(self, message: str, status_code: int = 401) -> None:
        super().__init__(message)
        self.status_code = status_code


class ValidationError(BrandBackupError):
    """Raised when a snapshot or request fails validation.

    Always raised before any row is written.
    """

    pass


class TableReadError(BrandBackupError):
    """Raised when reading a table during export fails.

    Export is all-or-nothing, so a single failing table aborts the
    whole snapshot.
    """

    def __init__(self, table: str, cause: BaseException) -> None:
        super().__init__(f"Failed to export {table}: {cause}")
        self.table = table
        self.cause = cause


class ProfileNotFoundError(BrandBackupError):
    """Raised when no database profile is configured."""

    pass
