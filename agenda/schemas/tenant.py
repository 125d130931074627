from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

class TenantResponse(BaseModel):
    # Service-account credentials are never exposed
    id: str
    name: Optional[str] = None
    spreadsheet_id: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class TenantEnvelope(BaseModel):
    msg: str
    cliente: TenantResponse
