"""
Record store error taxonomy.
"""


class StoreError(Exception):
    """Base class for record store failures."""


class DuplicateKeyError(StoreError):
    """A record with the same email is already stored."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"A survey has already been submitted with email '{email}'")


class ConstraintError(StoreError):
    """
    A storage-level constraint rejected the record.

    Records reach the store only after validation, so this signals a
    validator/storage mismatch rather than bad user input.
    """

    def __init__(self, constraint: str, message: str):
        self.constraint = constraint
        self.message = message
        super().__init__(f"[{constraint}] {message}")


class StoreUnavailable(StoreError):
    """The store could not be reached or a query against it failed."""
