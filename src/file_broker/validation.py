"""Arity checks run on every file request before any side effect."""
import logging
from typing import Any, Optional

from file_broker.errors import CallerContractError

logger = logging.getLogger(__name__)


def _missing(value: Any) -> bool:
    return value is None or value == ""


def validate_request_arguments(
    operation: str,
    filename: Optional[str],
    file_request_id: Optional[str],
    options: Any,
    report: Any,
    options_required: bool = True,
) -> None:
    """Check the positional contract of a file request.

    Args:
        operation: Name of the requested operation, used in error messages
        filename: Name of the file the request targets
        file_request_id: Correlation token echoed back in the outcome
        options: The request's options bag
        report: Callable receiving the outcome message
        options_required: False for operations whose options bag is optional

    Raises:
        CallerContractError: If a required argument is absent
    """
    if _missing(filename):
        problem = "a filename"
    elif _missing(file_request_id):
        problem = "a file request id"
    elif options_required and options is None:
        problem = "an options bag"
    elif not callable(report):
        problem = "a report function"
    else:
        return

    logger.error(f"{operation} rejected: caller did not supply {problem}")
    raise CallerContractError(f"{operation} requires {problem}")
