from pydantic import BaseModel
from typing import Optional, List

class DownloadResponse(BaseModel):
    downloadUrl: str
    coverUrl: Optional[str] = None
    success: bool = True

class ErrorResponse(BaseModel):
    message: str
    success: Optional[bool] = None
    isSessionError: Optional[bool] = None

class HealthResponse(BaseModel):
    status: str
    providerConfigured: bool
    missing: List[str] = []
