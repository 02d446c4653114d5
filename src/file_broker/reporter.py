"""Formats outcomes and hands them to the caller's report function."""
import logging
from typing import Any, Callable

from file_broker.schemas import MessageKind, Outcome

logger = logging.getLogger(__name__)

ReportFn = Callable[[str, dict], Any]


def emit(report: ReportFn, outcome: Outcome) -> None:
    """Invoke `report` once with the outcome's kind and body.

    Never raises: the channel is fire-and-forget, so a failing report
    function is logged and otherwise ignored.
    """
    try:
        report(outcome.kind.value, outcome.body())
    except Exception as e:
        logger.error(f"Report function failed for request {outcome.file_request_id}: {str(e)}")


def report_success(report: ReportFn, file_request_id: str, response: Any = None) -> None:
    logger.info(f"File request {file_request_id} succeeded")
    emit(report, Outcome(
        kind=MessageKind.SUCCESS,
        file_request_id=file_request_id,
        response=response,
    ))


def report_error(report: ReportFn, file_request_id: str, reason: str) -> None:
    logger.warning(f"File request {file_request_id} failed: {reason}")
    emit(report, Outcome(
        kind=MessageKind.ERROR,
        file_request_id=file_request_id,
        reason=reason,
    ))
