from sqlalchemy import Column, String, Integer, Text, Boolean, ForeignKey, Index
from models.base import Base


class VariantAttribute(Base):
    """
    Free-form custom fields of a variant.

    Installations add columns to this table; the attribute schema
    snapshot discovers them by introspection. Columns declared here are
    the stock ones.
    """
    __tablename__ = "variant_attributes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    variant_id = Column(Integer, ForeignKey("variants.id"), nullable=False, unique=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=True)

    attr1 = Column(String(500), nullable=True)
    attr2 = Column(String(500), nullable=True)
    attr3 = Column(Text, nullable=True)


class AttributeConfiguration(Base):
    """Per-column metadata for attribute tables"""
    __tablename__ = "attribute_configurations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    table_name = Column(String(255), nullable=False)
    column_name = Column(String(255), nullable=False)
    label = Column(String(255), nullable=True)
    translatable = Column(Boolean, default=False, nullable=False)

    __table_args__ = (
        Index("idx_attribute_configuration", "table_name", "column_name", unique=True),
    )
