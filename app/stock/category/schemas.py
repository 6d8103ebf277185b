from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

# ================= CREATE =================
class CategoryCreate(BaseModel):
    name: str
    description: Optional[str] = None


# ================= RESPONSE =================
class CategoryOut(BaseModel):
    id_category: int
    name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
