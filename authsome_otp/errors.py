"""Exceptions raised by the OTP lifecycle engine."""


class OtpError(Exception):
    """Base class for every error the engine raises."""


class GenerationConstraintViolation(OtpError, ValueError):
    pass


class RandomSourceFailure(OtpError):
    pass


class MetadataEncodingError(OtpError, ValueError):
    pass


class StorageFailure(OtpError):
    pass


class RecordNotFound(OtpError, LookupError):
    pass


class RecordExpired(OtpError):
    pass


class ValidationFailed(OtpError):
    """Record unknown or expired.

    Raised only by validation, which does not reveal which of the two it was.
    """


class CodeMismatch(OtpError):
    pass


class ParentMismatch(OtpError):
    pass


class Cancelled(OtpError):
    pass
