"""Email configuration schemas for API."""
from typing import Optional

from pydantic import BaseModel


class EmailConfigResponse(BaseModel):
    """Current SMTP configuration; the password is never returned."""
    smtp_host: str
    smtp_port: int
    smtp_username: str
    smtp_password: str
    smtp_use_tls: bool
    from_email: str
    from_name: str
    enabled: bool


class EmailTestRequest(BaseModel):
    """Optional address that receives a sample alert after verification."""
    test_email: Optional[str] = None


class EmailTestResponse(BaseModel):
    success: bool
    message: str
