import uuid

from db.session import Base
from sqlalchemy import (
    Column, String, Text, Integer, TIMESTAMP, JSON, func,
    ForeignKey, Boolean, Numeric, UniqueConstraint
)
from sqlalchemy.orm import relationship


def new_id() -> str:
    return uuid.uuid4().hex


# ---------------- SALES CHANNELS ----------------
class SalesChannel(Base):
    __tablename__ = "sales_channels"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    access_key = Column(String(64), unique=True, index=True, nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(TIMESTAMP, server_default=func.current_timestamp())

    # Relationships
    customers = relationship("Customer", back_populates="sales_channel")


# ---------------- CUSTOMERS ----------------
class Customer(Base):
    __tablename__ = "customers"

    id = Column(String(32), primary_key=True, default=new_id)
    sales_channel_id = Column(String(32), ForeignKey("sales_channels.id"), nullable=False, index=True)
    email = Column(String(255), nullable=False, index=True)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(TIMESTAMP, server_default=func.current_timestamp())

    # Relationships
    sales_channel = relationship("SalesChannel", back_populates="customers")
    wishlists = relationship("CustomerWishlist", back_populates="customer")


# ---------------- WISHLISTS ----------------
class CustomerWishlist(Base):
    __tablename__ = "customer_wishlists"
    __table_args__ = (
        UniqueConstraint("customer_id", "sales_channel_id", name="uniq_customer_wishlist_channel"),
    )

    id = Column(String(32), primary_key=True, default=new_id)
    customer_id = Column(String(32), ForeignKey("customers.id", ondelete="CASCADE"), nullable=False)
    sales_channel_id = Column(String(32), ForeignKey("sales_channels.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(TIMESTAMP, server_default=func.current_timestamp())
    updated_at = Column(TIMESTAMP, server_default=func.current_timestamp(
    ), onupdate=func.current_timestamp())

    # Relationships
    customer = relationship("Customer", back_populates="wishlists")
    sales_channel = relationship("SalesChannel")
    products = relationship(
        "CustomerWishlistProduct", back_populates="wishlist", cascade="all, delete-orphan")


class CustomerWishlistProduct(Base):
    __tablename__ = "customer_wishlist_products"
    __table_args__ = (
        UniqueConstraint("wishlist_id", "product_id", name="uniq_wishlist_product"),
    )

    id = Column(String(32), primary_key=True, default=new_id)
    wishlist_id = Column(String(32), ForeignKey("customer_wishlists.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(32), ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    # When the product was wishlisted; drives the listing order
    created_at = Column(TIMESTAMP, server_default=func.current_timestamp())

    # Relationships
    wishlist = relationship("CustomerWishlist", back_populates="products")
    product = relationship("Product", back_populates="wishlists")


# ---------------- PRODUCTS ----------------
class Product(Base):
    __tablename__ = "products"

    id = Column(String(32), primary_key=True, default=new_id)
    product_number = Column(String(64), unique=True, nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(15, 2), nullable=False)
    stock = Column(Integer, default=0)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(TIMESTAMP, server_default=func.current_timestamp())
    updated_at = Column(TIMESTAMP, server_default=func.current_timestamp(
    ), onupdate=func.current_timestamp())

    # Relationships
    wishlists = relationship("CustomerWishlistProduct", back_populates="product")
    visibilities = relationship(
        "ProductVisibility", back_populates="product", cascade="all, delete-orphan")


class ProductVisibility(Base):
    __tablename__ = "product_visibilities"
    __table_args__ = (
        UniqueConstraint("product_id", "sales_channel_id", name="uniq_product_sales_channel"),
    )

    VISIBILITY_LINK = 10
    VISIBILITY_SEARCH = 20
    VISIBILITY_ALL = 30

    id = Column(String(32), primary_key=True, default=new_id)
    product_id = Column(String(32), ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    sales_channel_id = Column(String(32), ForeignKey("sales_channels.id", ondelete="CASCADE"), nullable=False)
    visibility = Column(Integer, nullable=False, default=VISIBILITY_ALL)

    # Relationships
    product = relationship("Product", back_populates="visibilities")
    sales_channel = relationship("SalesChannel")


# ---------------- SYSTEM CONFIG ----------------
class SystemConfig(Base):
    __tablename__ = "system_config"
    __table_args__ = (
        UniqueConstraint("configuration_key", "sales_channel_id", name="uniq_config_key_sales_channel"),
    )

    id = Column(String(32), primary_key=True, default=new_id)
    configuration_key = Column(String(255), nullable=False, index=True)
    # Stored as {"_value": <value>} so scalars and lists share one column type
    configuration_value = Column(JSON, nullable=False)
    # NULL means the global default
    sales_channel_id = Column(String(32), ForeignKey("sales_channels.id", ondelete="CASCADE"), nullable=True)
    created_at = Column(TIMESTAMP, server_default=func.current_timestamp())
    updated_at = Column(TIMESTAMP, server_default=func.current_timestamp(
    ), onupdate=func.current_timestamp())
