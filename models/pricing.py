from sqlalchemy import Column, String, Integer, Float, Boolean, ForeignKey, Index
from models.base import Base


class CustomerGroup(Base):
    """
    Customer group owning a price list.

    tax_input marks groups whose prices are entered and displayed gross.
    """
    __tablename__ = "customer_groups"

    id = Column(Integer, primary_key=True, autoincrement=True)
    key = Column(String(15), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    tax_input = Column(Boolean, default=True, nullable=False)


class Price(Base):
    """
    One tier of a variant price list.

    Prices are stored net. A tier covers quantities from `quantity_from`
    up to `quantity_to` (NULL = open ended).
    """
    __tablename__ = "prices"

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    variant_id = Column(Integer, ForeignKey("variants.id"), nullable=False)
    customer_group_key = Column(String(15), ForeignKey("customer_groups.key"), nullable=False)

    quantity_from = Column(Integer, nullable=False, default=1)
    quantity_to = Column(Integer, nullable=True)
    price = Column(Float, nullable=False, default=0)
    pseudo_price = Column(Float, nullable=True)
    regulation_price = Column(Float, nullable=True)
    percent = Column(Float, nullable=True)

    __table_args__ = (
        Index("idx_price_variant_group", "variant_id", "customer_group_key", "quantity_from", unique=True),
    )
