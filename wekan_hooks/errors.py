"""Exceptions raised by hooks and the store adapter.

Hierarchy:
    HookError
    ├── NotFoundError       — card, board or custom field absent
    ├── StoreError          — MongoDB transport or query failure
    ├── ConfigurationError  — required board or custom field cannot be resolved
    └── PathBuildError      — card cannot be placed in the path hierarchy

A precondition that is not met (wrong board, value already set, missing
ancestor) is never an exception; rules report it as a skipped outcome.
"""


class HookError(Exception):
    """Base error for every failure surfaced by a hook."""


class NotFoundError(HookError):
    """A document looked up by key does not exist."""

    def __init__(self, kind: str, key: str):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} not found: {key}")


class StoreError(HookError):
    """The store could not complete an operation."""

    def __init__(self, message: str, cause: Exception | None = None):
        self.cause = cause
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class ConfigurationError(HookError):
    """A board or custom field the hooks depend on is missing."""


class PathBuildError(HookError):
    """The path of a card cannot be computed from its custom fields."""
