"""Curation error types."""


class CurationError(Exception):
    """Base class for every error raised by the curation engine."""


class InvalidArgument(CurationError, ValueError):
    """Unknown trading style, asset preference, strategy, or a bad limit.

    Raised before any data is read; no partial snapshot is produced.
    """


class SourceUnavailable(CurationError):
    """The asset table could not be read at all.

    Distinct from an empty result, which only means nothing qualifies right now.
    """
