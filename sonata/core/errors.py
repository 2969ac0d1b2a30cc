"""Exception types raised by Sonata components."""


class SonataError(Exception):
    """Base class for all Sonata errors."""


class AudioDecodeError(SonataError):
    """Audio could not be decoded into samples."""


class NoNotesFoundError(SonataError):
    """A scan or import finished without producing a single note."""


class DocumentAssemblyError(SonataError):
    """A paginated document could not be assembled from its pages."""


class TranscriptionCancelled(SonataError):
    """An audio scan was cancelled by its caller."""


class InvalidCompositionError(SonataError):
    """A composition payload is missing fields or has the wrong shape."""
