from typing import Any, Optional
from pydantic import BaseModel


class FieldError(BaseModel):
    field: str
    message: str
    value: Optional[Any] = None
