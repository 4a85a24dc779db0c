"""Error taxonomy shared by the stores, the lifecycle manager, and the views."""


class ApiDocError(Exception):
    """Base class for all api-doc-engine errors."""


class NotFound(ApiDocError):
    """A requested record does not exist in the store."""

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} {record_id!r} not found")


class StoreUnavailable(ApiDocError):
    """The record store failed for a transport or storage reason."""


class DuplicateRecord(ApiDocError):
    """A record would violate a uniqueness constraint."""

    def __init__(self, kind: str, key: str):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} {key!r} already exists")


class InvalidTransition(ApiDocError):
    """An illegal version status change was requested."""

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move version from {current!r} to {target!r}")


class UnsupportedLanguage(ApiDocError):
    """An example was requested for a language outside the supported set."""

    def __init__(self, language: str):
        self.language = language
        super().__init__(f"Unsupported example language: {language!r}")
