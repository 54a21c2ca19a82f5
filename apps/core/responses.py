"""
Translation of domain exceptions into DRF responses.
"""

import logging

from rest_framework import status
from rest_framework.response import Response

from apps.core.exceptions import (
    NotFoundError,
    PartialCommitError,
    TransientError,
    ValidationError,
)

logger = logging.getLogger(__name__)

HTTP_207_MULTI_STATUS = 207


def error_response(exc):
    """Build the response for a SalonLedgerError raised by a service call."""
    if isinstance(exc, ValidationError):
        return Response(exc.as_dict(), status=status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, NotFoundError):
        return Response({"detail": str(exc)}, status=status.HTTP_404_NOT_FOUND)

    if isinstance(exc, PartialCommitError):
        remainder = exc.remainder.as_dict() if exc.remainder is not None else None
        return Response(
            {
                "detail": str(exc),
                "committed": exc.committed,
                "total": exc.total,
                "remainder": remainder,
            },
            status=HTTP_207_MULTI_STATUS,
        )

    if isinstance(exc, TransientError):
        data = {"detail": f"No units were recorded: {exc}"}
        if exc.remainder is not None:
            data["remainder"] = exc.remainder.as_dict()
        return Response(data, status=status.HTTP_503_SERVICE_UNAVAILABLE)

    logger.error(f"Unhandled ledger error: {exc}", exc_info=True)
    return Response({"detail": str(exc)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
