from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    sessions: int


class ServiceDescriptor(BaseModel):
    name: str
    version: str
    description: str
    protocolVersion: str
    endpoints: Dict[str, str]


class AuthResult(BaseModel):
    authenticated: bool
    user_id: Optional[str] = None
    error: Optional[str] = None
