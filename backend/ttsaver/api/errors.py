from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse

from ttsaver.api.schemas import ErrorResponse


class DownloadError(Exception):
    def __init__(
        self,
        status_code: int,
        message: str,
        success: Optional[bool] = None,
        is_session_error: Optional[bool] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.success = success
        self.is_session_error = is_session_error

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            message=self.message,
            success=self.success,
            isSessionError=self.is_session_error,
        )


async def download_error_handler(request: Request, exc: DownloadError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(exclude_none=True),
    )
