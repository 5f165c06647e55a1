from sqlalchemy import Column, String, Integer, ForeignKey, Index
from models.base import Base


class ProductRelation(Base):
    """
    Link from a product to another product.

    kind is a RelationKind value ("accessory" or "similar"). Both kinds
    share one table and the same link semantics.
    """
    __tablename__ = "product_relations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    kind = Column(String(20), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    related_product_id = Column(Integer, ForeignKey("products.id"), nullable=False)

    __table_args__ = (
        Index("idx_product_relation", "kind", "product_id", "related_product_id", unique=True),
    )
