"""
ROS HTTP API - Public API
=========================
"""

from core.http_api.contracts import (
    HttpApiErrorBody,
    HttpApiResponse,
    HttpApiResult,
    RemindersReadRequest,
    SubRecordActionHttpRequest,
    SubRecordAddHttpRequest,
    SubRecordAddress,
    SubRecordCommentHttpRequest,
    SubRecordEditHttpRequest,
)
from core.http_api.dependencies import HttpApiDependencies
from core.http_api.errors import (
    error_response,
    exception_result,
    rejection_details,
    success_response,
)
from core.http_api.handlers import (
    get_reminders,
    post_record_archive,
    post_record_purge,
    post_record_restore,
    post_subrecord_add,
    post_subrecord_comment,
    post_subrecord_edit,
    post_subrecord_remove,
    post_subrecord_submit,
)

__all__ = [
    "HttpApiDependencies",
    "HttpApiErrorBody",
    "HttpApiResponse",
    "HttpApiResult",
    "RemindersReadRequest",
    "SubRecordActionHttpRequest",
    "SubRecordAddHttpRequest",
    "SubRecordAddress",
    "SubRecordCommentHttpRequest",
    "SubRecordEditHttpRequest",
    "error_response",
    "exception_result",
    "get_reminders",
    "post_record_archive",
    "post_record_purge",
    "post_record_restore",
    "post_subrecord_add",
    "post_subrecord_comment",
    "post_subrecord_edit",
    "post_subrecord_remove",
    "post_subrecord_submit",
    "rejection_details",
    "success_response",
]
