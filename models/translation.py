from sqlalchemy import Column, String, Integer, Boolean, Text, ForeignKey, Index
from models.base import Base


class Locale(Base):
    """
    Language shop. The default locale holds the base data stored on the
    entities themselves and never gets translation rows.
    """
    __tablename__ = "locales"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    locale = Column(String(10), nullable=False)
    is_default = Column(Boolean, default=False, nullable=False)


class Translation(Base):
    """
    Per-locale override payload of an entity.

    object_type: TranslationObjectType value
    object_key: id of the translated product or variant
    object_data: JSON object keyed by storage field names
    """
    __tablename__ = "translations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    object_type = Column(String(50), nullable=False)
    object_key = Column(Integer, nullable=False)
    locale_id = Column(Integer, ForeignKey("locales.id"), nullable=False)
    object_data = Column(Text, nullable=False)

    __table_args__ = (
        Index("idx_translation_object", "object_type", "object_key", "locale_id", unique=True),
    )
