from sqlalchemy import Column, String, Integer, Boolean, ForeignKey, Index
from models.base import Base


class Category(Base):
    """
    Category tree node.

    `path` is the materialized ancestor chain: ancestor ids joined with "|",
    root first, without the node itself ("3|7" for a node below 7 below 3).
    Root nodes have an empty path.
    """
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    parent_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)
    name = Column(String(255), nullable=False)
    path = Column(String(255), nullable=True)
    position = Column(Integer, default=0, nullable=False)
    active = Column(Boolean, default=True, nullable=False)


class ProductCategory(Base):
    """Product to category assignment"""
    __tablename__ = "product_categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)

    __table_args__ = (
        Index("idx_product_category", "product_id", "category_id", unique=True),
    )
