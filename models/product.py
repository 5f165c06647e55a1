from sqlalchemy import (
    Column, String, Integer, DateTime, Text, Boolean, Float, ForeignKey, Index
)
from datetime import datetime
from models.base import Base, VariantKind


class Supplier(Base):
    """Manufacturer of a product, matched by name on import"""
    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)


class Tax(Base):
    """Tax rate, matched by rate on import"""
    __tablename__ = "taxes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tax = Column(Float, nullable=False)
    description = Column(String(255), nullable=True)


class Unit(Base):
    """Measuring unit of a variant (l, kg, m, ...)"""
    __tablename__ = "units"

    id = Column(Integer, primary_key=True, autoincrement=True)
    unit = Column(String(50), nullable=False, unique=True)
    description = Column(String(255), nullable=True)


class Product(Base):
    """
    Root catalog entity.

    Design:
    - Shared data (name, texts, tax, supplier) lives here
    - Purchasable data lives on Variant; exactly one variant has kind=MAIN
    - filter_group_id points to the property group used for filtering
    """
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    description_long = Column(Text, nullable=True)
    meta_title = Column(String(255), nullable=True)
    keywords = Column(String(255), nullable=True)

    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=True)
    tax_id = Column(Integer, ForeignKey("taxes.id"), nullable=True)
    filter_group_id = Column(Integer, ForeignKey("property_groups.id"), nullable=True)
    configurator_set_id = Column(Integer, ForeignKey("configurator_sets.id"), nullable=True)

    active = Column(Boolean, default=True, nullable=False)
    pseudo_sales = Column(Integer, default=0, nullable=False)
    highlight = Column(Boolean, default=False, nullable=False)
    price_group_id = Column(Integer, nullable=True)
    price_group_active = Column(Boolean, default=False, nullable=False)
    notification = Column(Boolean, default=False, nullable=False)
    template = Column(String(255), nullable=True)
    mode = Column(Integer, default=0, nullable=False)
    available_from = Column(DateTime, nullable=True)
    available_to = Column(DateTime, nullable=True)

    added = Column(DateTime, nullable=False, default=datetime.utcnow)
    changed = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


class Variant(Base):
    """
    Purchasable SKU of a product, identified by its order number.
    """
    __tablename__ = "variants"

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)

    number = Column(String(255), nullable=False, unique=True)
    kind = Column(Integer, default=VariantKind.VARIANT.value, nullable=False)
    additional_text = Column(String(255), nullable=True)
    supplier_number = Column(String(255), nullable=True)
    ean = Column(String(255), nullable=True)

    active = Column(Boolean, default=True, nullable=False)
    in_stock = Column(Integer, nullable=True)
    stock_min = Column(Integer, nullable=True)
    last_stock = Column(Boolean, default=False, nullable=False)
    position = Column(Integer, default=0, nullable=False)

    weight = Column(Float, nullable=True)
    width = Column(Float, nullable=True)
    height = Column(Float, nullable=True)
    length = Column(Float, nullable=True)

    unit_id = Column(Integer, ForeignKey("units.id"), nullable=True)
    purchase_steps = Column(Integer, nullable=True)
    min_purchase = Column(Integer, default=1, nullable=False)
    max_purchase = Column(Integer, nullable=True)
    purchase_unit = Column(Float, nullable=True)
    reference_unit = Column(Float, nullable=True)
    pack_unit = Column(String(255), nullable=True)
    release_date = Column(DateTime, nullable=True)
    shipping_time = Column(String(50), nullable=True)
    shipping_free = Column(Boolean, default=False, nullable=False)
    purchase_price = Column(Float, default=0, nullable=False)

    __table_args__ = (
        Index("idx_variant_product_kind", "product_id", "kind"),
    )
