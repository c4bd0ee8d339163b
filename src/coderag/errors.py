"""Error taxonomy shared by the pipeline, the CLI and the MCP tools."""


class RagError(Exception):
    """Base class for coderag errors.

    The message is meant to be shown to the caller as-is.
    """


class NotFoundError(RagError):
    """A requested path does not exist."""


class EmptyError(RagError):
    """A directory holds no indexable files."""


class InvalidArgumentError(RagError):
    """A call was rejected before reaching the vector store."""


class ProviderFailure(RagError):
    """The embedding provider failed or returned no vector."""


class StoreFailure(RagError):
    """A vector store call failed."""


class CollectionNotFoundError(StoreFailure):
    """The backing collection/index does not exist (not indexed yet)."""


class ScanError(RagError):
    """The scan root itself could not be enumerated."""


class UnexpectedError(RagError):
    """Anything not covered above."""
