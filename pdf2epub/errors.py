"""Errors surfaced to the caller as a single human-readable message."""


class ConversionError(ValueError):
    """Request-level failure. The message is shown to the user as-is."""


class TocError(ConversionError):
    pass


class PageCorrectionError(ConversionError):
    pass


class FileTooLargeError(ConversionError):
    pass
