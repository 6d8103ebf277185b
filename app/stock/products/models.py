from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, Boolean, CheckConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from app.database import Base


class Product(Base):
    __tablename__ = "products"

    id_product = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    description = Column(String, nullable=True)

    # Business key, unique across deleted rows too
    code_product = Column("codeProduct", String, unique=True, nullable=False, index=True)

    price = Column(Float, nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    image = Column(String, nullable=True)

    id_category = Column(
        Integer,
        ForeignKey("categories.id_category", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )

    # Soft-delete flag; rows are never removed
    is_deleted = Column(Boolean, default=False, nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    category = relationship("Category", back_populates="products")

    stock_history = relationship(
        "StockHistory",
        back_populates="product",
        order_by="StockHistory.id_stock_history"
    )
    order_details = relationship("OrderDetail", back_populates="product")
    product_reviews = relationship("ProductReview", back_populates="product")
    cart = relationship("CartItem", back_populates="product")
    wishlist = relationship("WishlistItem", back_populates="product")
    order_returns = relationship("OrderReturn", back_populates="product")

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_product_price_positive"),
        CheckConstraint("stock >= 0", name="ck_product_stock_positive"),
    )
