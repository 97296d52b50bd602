from typing import Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    code: Optional[str] = None


__all__ = ["ErrorResponse"]
