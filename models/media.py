from sqlalchemy import Column, String, Integer, Boolean, ForeignKey, Index
from models.base import Base


class Image(Base):
    """
    Product image.

    `path` is the file name without extension, relative to the media
    directory. Exactly one image per product has main=True.
    """
    __tablename__ = "images"

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    variant_id = Column(Integer, ForeignKey("variants.id"), nullable=True)
    media_id = Column(Integer, nullable=True)

    path = Column(String(255), nullable=False)
    extension = Column(String(10), nullable=False, default="jpg")
    description = Column(String(255), nullable=True)
    main = Column(Boolean, default=False, nullable=False)
    position = Column(Integer, default=1, nullable=False)

    __table_args__ = (
        Index("idx_image_product_path", "product_id", "path", unique=True),
    )
