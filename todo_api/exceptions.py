class TaskItemError(Exception):
    """Base class for task item service errors"""


class InvalidPatchDocument(TaskItemError):
    """The patch document is missing or cannot be applied"""


class StoreFailure(TaskItemError):
    """The underlying database failed; the caller gets a 500"""
