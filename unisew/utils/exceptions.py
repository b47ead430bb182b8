"""커스텀 HTTP 예외 클래스 모듈.

Custom HTTP exception classes module.
Provides pre-configured HTTPException subclasses for the error taxonomy of
the portal workflows: local validation failures, missing or terminal
resources, duplicate submissions and failures of the remote backend or
upload provider. Workflows raise these after queueing a notification, so
the message reaches the user both ways.

Usage:
    from unisew.utils.exceptions import BadRequestError, UpstreamError
    raise BadRequestError("Please select a problem level")
    raise UpstreamError("Failed to approve report")
"""

from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """404 Not Found 예외 — 요청한 리소스를 찾을 수 없을 때 사용.

    404 Not Found exception.
    Raised when a report or quotation is not in the currently loaded list.

    Args:
        detail: 오류 메시지 (Error message, default: "Resource not found")
    """

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ConflictError(HTTPException):
    """409 Conflict 예외 — 이미 처리되었거나 처리 중인 요청.

    409 Conflict exception.
    Raised when evidence was already given for a report, or when a submission
    is attempted while the same dialog is still submitting.

    Args:
        detail: 오류 메시지 (Error message, default: "Resource already exists")
    """

    def __init__(self, detail: str = "Resource already exists") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class ForbiddenError(HTTPException):
    """403 Forbidden 예외 — 권한 부족 시 사용.

    403 Forbidden exception.
    Raised when the session's role cannot use a workflow
    (e.g. a school account calling the admin report endpoints).

    Args:
        detail: 오류 메시지 (Error message, default: "Insufficient permissions")
    """

    def __init__(self, detail: str = "Insufficient permissions") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class UnauthorizedError(HTTPException):
    """401 Unauthorized 예외 — 세션이 없거나 만료됨.

    401 Unauthorized exception.
    Raised when the session blob is missing, invalid, or expired.
    The front-end answers this by redirecting to the login page.

    Args:
        detail: 오류 메시지 (Error message, default: "Authentication required")
    """

    def __init__(self, detail: str = "Authentication required") -> None:
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class BadRequestError(HTTPException):
    """400 Bad Request 예외 — 입력 검증 실패 시 사용.

    400 Bad Request exception.
    Raised for client-local validation failures (missing problem level,
    empty evidence content, missing evidence medium, oversized file).
    No backend call is made when this is raised.

    Args:
        detail: 오류 메시지 (Error message, default: "Bad request")
    """

    def __init__(self, detail: str = "Bad request") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class UpstreamError(HTTPException):
    """502 Bad Gateway 예외 — 백엔드 또는 업로드 제공자 실패.

    502 Bad Gateway exception.
    Raised when the remote backend answers non-200 or cannot be reached, or
    when the upload provider fails every file. Workflow state is left as it
    was before the call so the user can retry.

    Args:
        detail: 오류 메시지 (Error message, default: "Upstream request failed")
    """

    def __init__(self, detail: str = "Upstream request failed") -> None:
        super().__init__(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)
