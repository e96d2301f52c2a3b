class RecGridError(Exception):
    """Base class for the errors raised by the grid editor."""


class StoreOperationError(RecGridError):
    """The store was unable to complete an operation.

    Attributes:
        location: The location that the operation was targeting, if known.
    """

    def __init__(self, message: str, location: str = ""):
        super().__init__(message)
        self.location = location


class RecordNotFoundError(StoreOperationError):
    """There is no record at the given location (or the record is not
    persisted)."""


class RecordExistsError(StoreOperationError):
    """Another record already occupies the target location."""


class InvalidNameError(StoreOperationError):
    """The name can not be used for a record."""


class RecordCreateError(StoreOperationError):
    """A default instance of the record type could not be created."""


class FieldValueError(RecGridError):
    """The value was rejected by the validation of the record type.

    Attributes:
        path: The field that was being changed.
        value: The rejected value.
    """

    def __init__(self, message: str, path: str = "", value=None):
        super().__init__(message)
        self.path = path
        self.value = value
