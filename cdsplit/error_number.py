from enum import IntEnum


class ErrorNumber(IntEnum):
    NoError = 0
    InvalidData = 1
    InvalidArgument = 2
    NoSuchFile = 3
    CannotOpenFile = 4
    OutOfRange = 5
    ReadError = 6
    TooManyTracks = 7
    UnexpectedException = 99


class ImageError(Exception):
    """Base for every fatal error raised while converting or inferring an image."""
    error_number = ErrorNumber.UnexpectedException

    def __init__(self, message: str, error_number: ErrorNumber = None):
        super().__init__(message)
        if error_number is not None:
            self.error_number = error_number


class MalformedLayout(ImageError):
    """Bad directive syntax, missing FILE/TRACK context or unknown mode."""
    error_number = ErrorNumber.InvalidData


class GeometryError(ImageError):
    """Index ordering violations and byte ranges that do not fit the source."""
    error_number = ErrorNumber.OutOfRange


class CapacityExceeded(GeometryError):
    error_number = ErrorNumber.TooManyTracks


class SourceReadError(ImageError):
    """Open, seek or read failure on a source file."""
    error_number = ErrorNumber.ReadError
