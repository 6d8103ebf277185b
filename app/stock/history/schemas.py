from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

from app.stock.history.models import MovementType


class StockHistoryOut(BaseModel):
    id_stock_history: int
    id_product: int
    quantity_before: int
    quantity_after: int
    movement_type: MovementType
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
