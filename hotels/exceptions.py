# hotels/exceptions.py
#
# Purpose:
# - Domain errors raised by the hotel services.
# - Single mapping from error class to HTTP status, used by the DRF
#   exception handler configured in settings.REST_FRAMEWORK.
#
# Taxonomy:
# - django.core.exceptions.ValidationError: bad input (shift overlap,
#   missing field, duplicate staff code, invalid tip amount)  -> 400
# - DuplicateAssignmentError: active assignment already exists  -> 409
# - RecordNotFoundError: update/delete/get of an unknown id      -> 404
# - StorageError: serialization or database failure              -> 503
#
from django.core.exceptions import ValidationError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler


class DuplicateAssignmentError(ValidationError):
    """Raised when a staff member already holds an active assignment to the same room and shift."""


class RecordNotFoundError(Exception):
    """Raised when a record id does not exist in its collection."""

    def __init__(self, collection, record_id):
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"No record '{record_id}' in {collection}.")


class StorageError(Exception):
    """Raised when a collection cannot be serialized or persisted."""


# Checked in order: subclasses before their parents.
ERROR_STATUS = (
    (DuplicateAssignmentError, status.HTTP_409_CONFLICT),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (RecordNotFoundError, status.HTTP_404_NOT_FOUND),
    (StorageError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def error_message(exc):
    """Return the first human-readable message of an exception."""
    if isinstance(exc, ValidationError):
        messages = exc.messages
        return messages[0] if messages else str(exc)
    return str(exc)


def api_exception_handler(exc, context):
    """
    DRF exception handler.
    Domain errors become {"detail": "<message>"} with the status from
    ERROR_STATUS; everything else falls through to DRF's default handler.
    """
    for error_cls, status_code in ERROR_STATUS:
        if isinstance(exc, error_cls):
            return Response({"detail": error_message(exc)}, status=status_code)
    return exception_handler(exc, context)
