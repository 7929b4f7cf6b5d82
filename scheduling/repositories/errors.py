# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository errors, raised when a write to the backing store fails.
"""


class StoreError(RuntimeError):
    """The backing store rejected or failed a read/write. Recoverable by retrying the action."""


class DuplicateKeyError(StoreError):
    """A unique key (person + date, template + date) is already taken."""
