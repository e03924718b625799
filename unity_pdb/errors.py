from typing import Optional


class UnityPdbError(Exception):
    """Base class for every failure the downloader reports.

    ``stage`` names the pipeline step that failed and is what the command
    line prints when a run aborts.
    """

    stage = 'run'

    def __init__(self, message: str, *, stage: Optional[str] = None):
        super().__init__(message)
        if stage is not None:
            self.stage = stage


class ExtractPdbException(UnityPdbError):
    stage = 'parse'


class ModuleReadError(ExtractPdbException):
    stage = 'read'


class MalformedContainerError(ExtractPdbException):
    pass


class MissingDebugDirectoryError(ExtractPdbException):
    pass


class MissingDebugInfoError(ExtractPdbException):
    pass


class MalformedDebugRecordError(ExtractPdbException):
    pass


class PathEncodingError(UnityPdbError):
    stage = 'derive'


class DownloadPdbException(UnityPdbError):
    stage = 'fetch'


class FetchFailedError(DownloadPdbException):
    def __init__(self, message: str, *, reason: str, status: Optional[int] = None):
        super().__init__(message)
        self.reason = reason
        self.status = status


class StorageIOError(DownloadPdbException):
    pass


class ExtractCabException(UnityPdbError):
    stage = 'extract'


class ArchiveCorruptError(ExtractCabException):
    pass


class CleanupFailedError(UnityPdbError):
    stage = 'cleanup'
