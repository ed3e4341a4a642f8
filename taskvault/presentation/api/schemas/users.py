from typing import Optional

from pydantic import BaseModel


class LoginRequest(BaseModel):
    # Optional so blank and missing credentials both reach the 400 path.
    username: Optional[str] = None
    password: Optional[str] = None
