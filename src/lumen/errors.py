"""Exception hierarchy for Lumen."""


class LumenError(Exception):
    """Base class for all Lumen errors."""

    pass


class ModelProviderError(LumenError):
    """Raised when the model provider returns an unusable reply."""

    pass


class MemoryStoreError(LumenError):
    """Raised when the memory document cannot be persisted."""

    pass
