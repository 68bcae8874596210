"""
Error taxonomy shared by the list store, the recommendation pipeline and the API.

Duplicate inserts are not errors: ListStore.insert reports them in its result.
"""


class RecommandateurError(Exception):
    """Base class for all domain errors"""


class ValidationError(RecommandateurError):
    """Missing or malformed input (canonical_key, rating, query parameters)"""


class ConflictError(RecommandateurError):
    """The key is already held by a different collection; nothing was written"""

    def __init__(self, key: str, conflict_with: str):
        super().__init__(f"'{key}' already present in '{conflict_with}'")
        self.key = key
        self.conflict_with = conflict_with


class NotFoundError(RecommandateurError):
    """The selection pipeline produced no eligible candidate"""


class StorageUnavailable(RecommandateurError):
    """The underlying key-value service could not be reached"""
