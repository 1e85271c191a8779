"""Custom exceptions for Logquartz services."""


class PublishError(Exception):
    """Base class for errors raised while publishing a graph."""


class SourceRootError(PublishError):
    """Raised when the graph root cannot be published at all.

    Attributes:
        path: Path that was expected to be a Logseq graph
        message: Human-readable error message
    """

    def __init__(self, path: str, message: str = "Not a Logseq graph"):
        self.path = path
        self.message = message
        super().__init__(f"{message}: {path}")


class DocumentTransformError(PublishError):
    """Raised when one document cannot be published.

    Only that document is lost; the publisher records the failure and keeps
    going with its siblings.

    Attributes:
        path: Source path of the failed document
        message: Human-readable error message
    """

    def __init__(self, path: str, message: str = "Failed to publish document"):
        self.path = path
        self.message = message
        super().__init__(f"{message}: {path}")
