from pydantic import BaseModel
from typing import Optional


class SuccessfulMessage(BaseModel):
    message: str
    data: Optional[dict] = None
