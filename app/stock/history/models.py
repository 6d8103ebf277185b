import enum
from datetime import datetime

from sqlalchemy import Column, Integer, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship

from app.database import Base


class MovementType(str, enum.Enum):
    ADDED = "added"
    REMOVED = "removed"
    ADJUSTED = "adjusted"


class StockHistory(Base):
    __tablename__ = "stock_history"

    id_stock_history = Column(Integer, primary_key=True, index=True)

    id_product = Column(
        Integer,
        ForeignKey("products.id_product", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )

    quantity_before = Column(Integer, nullable=False, default=0)
    quantity_after = Column(Integer, nullable=False)

    movement_type = Column(
        Enum(
            MovementType,
            name="movement_type",
            values_callable=lambda members: [m.value for m in members],
        ),
        nullable=False
    )

    created_at = Column(DateTime, default=datetime.utcnow)

    product = relationship("Product", back_populates="stock_history")
