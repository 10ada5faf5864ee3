"""
Error taxonomy for download runs.

Setup errors (corrupt checkpoint, unreadable manifest) end the run.
FetchError subclasses are raised per record and recorded in failed.json;
the batch continues after them.
"""


class PhotoFetcherError(Exception):
    """Base class for all downloader errors."""


class CorruptCheckpoint(PhotoFetcherError):
    """A checkpoint or failure file exists but cannot be parsed."""


class ManifestError(PhotoFetcherError):
    """The manifest file is missing, unreadable or not a JSON array."""


class FetchError(PhotoFetcherError):
    """A single record could not be downloaded."""

    step = "fetch"


class NavigationError(FetchError):
    step = "navigate"


class ImageNotFound(FetchError):
    step = "extract"


class DownloadError(FetchError):
    step = "download"


class WriteError(FetchError):
    step = "write"
