"""Error kinds surfaced by the accounts core."""


class AccountsError(Exception):
    """Base class for every failure the accounts core reports."""

    kind = "error"


class NotFoundError(AccountsError):
    """No stored record matches a lookup."""

    kind = "not_found"


class AlreadyExistsError(AccountsError):
    """A record with the same unique key is already stored."""

    kind = "already_exists"


class InvalidIdError(AccountsError):
    """An identifier string cannot be parsed into the store's native key."""

    kind = "invalid_id"


class InvalidCredentialsError(AccountsError):
    """Login verification or registration input failed."""

    kind = "invalid_credentials"


class StoreError(AccountsError):
    """The underlying storage backend failed (I/O, connection, query)."""

    kind = "store_error"
