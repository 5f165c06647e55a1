from sqlalchemy.orm import declarative_base
import enum

Base = declarative_base()


# ============================================================================
# ENUMS
# ============================================================================

class VariantKind(int, enum.Enum):
    """Variant kind discriminator"""
    MAIN = 1
    VARIANT = 2


class RelationKind(str, enum.Enum):
    """Product to product link types"""
    ACCESSORY = "accessory"
    SIMILAR = "similar"


class TranslationObjectType(str, enum.Enum):
    """Owner type of a translation payload"""
    PRODUCT = "article"
    VARIANT = "variant"


class ConfiguratorSetType(int, enum.Enum):
    """Storefront rendering of a configurator set"""
    STANDARD = 0
    SELECTION = 1
    IMAGE = 2
