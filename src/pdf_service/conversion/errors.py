from enum import Enum


class ErrorKind(str, Enum):
    UNSUPPORTED_FORMAT = "unsupported_format"
    UNSUPPORTED_IMAGE_FORMAT = "unsupported_image_format"
    DECODE_FAILURE = "decode_failure"
    OFFICE_CONVERSION_UNAVAILABLE = "office_conversion_unavailable"
    IO_FAILURE = "io_failure"


class ConversionError(Exception):
    """Classified conversion failure.

    The message is meant for end users and never contains filesystem paths;
    the underlying exception, if any, is chained as ``__cause__``.
    """

    kind: ErrorKind = ErrorKind.IO_FAILURE

    def __init__(self, message: str, kind: ErrorKind | None = None) -> None:
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind

    def to_detail(self) -> dict[str, str]:
        return {"code": self.kind.value, "message": self.message}


class UnsupportedFormat(ConversionError):
    kind = ErrorKind.UNSUPPORTED_FORMAT


class UnsupportedImageFormat(ConversionError):
    kind = ErrorKind.UNSUPPORTED_IMAGE_FORMAT


class DecodeFailure(ConversionError):
    kind = ErrorKind.DECODE_FAILURE


class OfficeConversionUnavailable(ConversionError):
    kind = ErrorKind.OFFICE_CONVERSION_UNAVAILABLE


class IOFailure(ConversionError):
    kind = ErrorKind.IO_FAILURE
