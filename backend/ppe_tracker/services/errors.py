# Overview: Error taxonomy shared by the workflow services.

"""
Workflow errors.

Every service raises one of these for expected failures. The dispatcher
turns any PpeError into an error envelope carrying str(error) only; callers
get no machine-readable code.
"""


class PpeError(Exception):
    """Base class for expected workflow failures."""
    pass


class NotFoundError(PpeError):
    """Raised when a referenced voucher, loan, item, or record is absent."""
    pass


class InvalidStateError(PpeError):
    """Raised when an action is not allowed from the record's current state."""
    pass


class OutOfStockError(InvalidStateError):
    """Raised when an item does not have enough stock for the operation."""
    pass


class InvalidInputError(PpeError):
    """Raised when request data fails validation."""
    pass


class UpstreamFailureError(PpeError):
    """Raised when an external collaborator (row store, chat API) fails."""
    pass


class InvalidActionError(PpeError):
    """Raised when the dispatcher receives an unknown action name."""
    pass
