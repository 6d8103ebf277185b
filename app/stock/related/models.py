"""
Rows owned by the order, review, cart and wishlist subsystems.

The catalog only reads them to expand a product's detail view.
"""
from datetime import datetime

from sqlalchemy import Column, Integer, Float, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from app.database import Base


class OrderDetail(Base):
    __tablename__ = "order_details"

    id_order_detail = Column(Integer, primary_key=True, index=True)
    id_order = Column(Integer, nullable=False, index=True)
    id_product = Column(Integer, ForeignKey("products.id_product"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Float, nullable=False)

    product = relationship("Product", back_populates="order_details")


class ProductReview(Base):
    __tablename__ = "product_reviews"

    id_review = Column(Integer, primary_key=True, index=True)
    id_product = Column(Integer, ForeignKey("products.id_product"), nullable=False, index=True)
    id_user = Column(Integer, nullable=True)
    rating = Column(Integer, nullable=False)
    comment = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    product = relationship("Product", back_populates="product_reviews")


class CartItem(Base):
    __tablename__ = "cart"

    id_cart = Column(Integer, primary_key=True, index=True)
    id_product = Column(Integer, ForeignKey("products.id_product"), nullable=False, index=True)
    id_user = Column(Integer, nullable=True)
    quantity = Column(Integer, nullable=False, default=1)

    product = relationship("Product", back_populates="cart")


class WishlistItem(Base):
    __tablename__ = "wishlist"

    id_wishlist = Column(Integer, primary_key=True, index=True)
    id_product = Column(Integer, ForeignKey("products.id_product"), nullable=False, index=True)
    id_user = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    product = relationship("Product", back_populates="wishlist")


class OrderReturn(Base):
    __tablename__ = "order_returns"

    id_return = Column(Integer, primary_key=True, index=True)
    id_order = Column(Integer, nullable=False, index=True)
    id_product = Column(Integer, ForeignKey("products.id_product"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=1)
    reason = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    product = relationship("Product", back_populates="order_returns")
