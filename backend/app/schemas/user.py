from pydantic import BaseModel
from typing import Optional


class RoleUpdate(BaseModel):
    # Validated against UserRole in the endpoint so the error can list valid roles
    role: Optional[str] = None
