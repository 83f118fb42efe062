# cityscope/core/test_results.py
import logging

from cityscope.core.errors import NotFoundError
from cityscope.core.results import ServiceResult


def test_fail_maps_error_code_to_status():
    result = ServiceResult.fail(NotFoundError("Post not found"))
    assert (result.success, result.error, result.status_code) == (False, "NOT_FOUND", 404)
    assert result.to_dict() == {"success": False, "message": "Post not found", "error": "NOT_FOUND"}


def test_internal_logs_through_module_logger(caplog):
    with caplog.at_level(logging.ERROR, logger="cityscope.core.results"):
        try:
            raise RuntimeError("firestore down")
        except RuntimeError:
            result = ServiceResult.internal("Post lookup failed")

    assert result.status_code == 500
    assert result.message == "Internal server error"
    record = caplog.records[-1]
    assert record.name == "cityscope.core.results"
    assert record.exc_info[0] is RuntimeError
