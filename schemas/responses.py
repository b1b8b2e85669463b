from pydantic import BaseModel
from typing import Optional, Any

class StandardSuccessResponse(BaseModel):
    success: bool = True
    message: str
    data: Optional[Any] = None

class StandardErrorResponse(BaseModel):
    success: bool = False
    error: str
