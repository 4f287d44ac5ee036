from enum import Enum


class ErrorKind(str, Enum):
    NOT_FOUND = "NotFound"
    INVALID_INPUT = "InvalidInput"
    UNAUTHORIZED = "Unauthorized"
    FORBIDDEN = "Forbidden"
    # second half of a paired mutation failed after the first half committed
    PARTIAL_FAILURE = "PartialFailure"
    INTERNAL_ERROR = "InternalError"
