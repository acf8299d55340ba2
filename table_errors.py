class TablrError(Exception):
    pass


class NotFoundError(TablrError, LookupError):
    pass


class InvalidArgumentError(TablrError, ValueError):
    pass


class IndexOutOfRangeError(InvalidArgumentError, IndexError):
    pass


class InvalidValueError(TablrError, ValueError):
    pass


class BlockedOperationError(TablrError):
    pass
