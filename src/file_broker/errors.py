"""Exceptions raised by the broker and its file store adapters."""


class CallerContractError(TypeError):
    """A request was issued without one of its required positional arguments.

    Raised synchronously, before any store call, and never reported through
    the message channel: it points at a broken integration, not at a
    recoverable runtime condition.
    """


class FileStoreError(Exception):
    """Base class for failures coming back from a file store."""


class FileAlreadyExistsError(FileStoreError):
    pass


class FileMissingError(FileStoreError):
    pass
