"""
Pydantic schemas for incoming write rows with validation.

Field aliases are the export column names, so a projected row can be
written back unchanged. Empty strings coming from flat files are treated
as missing values and are dropped before validation.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Optional, Dict, Any
from datetime import date, datetime

ATTRIBUTE_PREFIX = "attribute"


class BaseRow(BaseModel):
    """Common behaviour of all row groups"""

    parent_index_element: Optional[int] = Field(None, alias="parentIndexElement")

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @model_validator(mode="before")
    @classmethod
    def drop_blank_values(cls, data: Any) -> Any:
        """Flat files deliver missing values as empty strings"""
        if isinstance(data, dict):
            return {
                k: v for k, v in data.items()
                if v is not None and not (isinstance(v, str) and v.strip() == "")
            }
        return data

    def attributes(self) -> Dict[str, Any]:
        """Return `attribute<Name>` columns passed along with the row"""
        extra = self.model_extra or {}
        return {
            k: v for k, v in extra.items()
            if k.startswith(ATTRIBUTE_PREFIX) and len(k) > len(ATTRIBUTE_PREFIX)
        }


class ProductRow(BaseRow):
    """
    Root row of a write batch (group `article`).

    Ensures:
    - An order number is present
    - processed rows only stand in for an existing variant
    """

    order_number: str = Field(..., min_length=1, max_length=255, alias="orderNumber")
    main_number: Optional[str] = Field(None, alias="mainNumber")
    processed: int = 0

    # Product fields
    name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    description_long: Optional[str] = Field(None, alias="descriptionLong")
    meta_title: Optional[str] = Field(None, alias="metaTitle")
    keywords: Optional[str] = None
    supplier_name: Optional[str] = Field(None, alias="supplierName")
    tax: Optional[float] = Field(None, ge=0)
    tax_id: Optional[int] = Field(None, alias="taxId")
    top_seller: Optional[bool] = Field(None, alias="topSeller")
    pseudo_sales: Optional[int] = Field(None, alias="pseudoSales")
    price_group_id: Optional[int] = Field(None, alias="priceGroupId")
    price_group_active: Optional[bool] = Field(None, alias="priceGroupActive")
    notification: Optional[bool] = None
    template: Optional[str] = None
    mode: Optional[int] = None
    available_from: Optional[datetime] = Field(None, alias="availableFrom")
    available_to: Optional[datetime] = Field(None, alias="availableTo")

    # Variant fields
    additional_text: Optional[str] = Field(None, alias="additionalText")
    supplier_number: Optional[str] = Field(None, alias="supplierNumber")
    ean: Optional[str] = None
    active: Optional[bool] = None
    in_stock: Optional[int] = Field(None, alias="inStock")
    stock_min: Optional[int] = Field(None, alias="stockMin")
    last_stock: Optional[bool] = Field(None, alias="lastStock")
    position: Optional[int] = None
    weight: Optional[float] = Field(None, ge=0)
    width: Optional[float] = Field(None, ge=0)
    height: Optional[float] = Field(None, ge=0)
    length: Optional[float] = Field(None, ge=0)
    unit: Optional[str] = None
    purchase_steps: Optional[int] = Field(None, alias="purchaseSteps")
    min_purchase: Optional[int] = Field(None, ge=1, alias="minPurchase")
    max_purchase: Optional[int] = Field(None, alias="maxPurchase")
    purchase_unit: Optional[float] = Field(None, alias="purchaseUnit")
    reference_unit: Optional[float] = Field(None, alias="referenceUnit")
    pack_unit: Optional[str] = Field(None, alias="packUnit")
    release_date: Optional[datetime] = Field(None, alias="releaseDate")
    shipping_time: Optional[str] = Field(None, alias="shippingTime")
    shipping_free: Optional[bool] = Field(None, alias="shippingFree")
    purchase_price: Optional[float] = Field(None, ge=0, alias="purchasePrice")

    @field_validator("order_number", "main_number")
    @classmethod
    def clean_number(cls, v):
        """Order numbers never carry surrounding whitespace"""
        if v is not None:
            v = v.strip()
        return v

    @field_validator("available_from", "available_to", "release_date", mode="before")
    @classmethod
    def date_only(cls, v):
        """Exports format dates as YYYY-MM-DD"""
        if isinstance(v, str) and len(v.strip()) == 10:
            return datetime.combine(date.fromisoformat(v.strip()), datetime.min.time())
        return v

    @property
    def is_processed(self) -> bool:
        return self.processed == 1


class PriceRow(BaseRow):
    """One price tier; `to` may be open ended ("beliebig", empty)"""

    price_group: str = Field("EK", alias="priceGroup")
    price: Optional[float] = Field(None, ge=0)
    pseudo_price: Optional[float] = Field(None, ge=0, alias="pseudoPrice")
    regulation_price: Optional[float] = Field(None, ge=0, alias="regulationPrice")
    quantity_from: int = Field(1, ge=1, alias="from")
    quantity_to: Optional[int] = Field(None, alias="to")

    @field_validator("quantity_to", mode="before")
    @classmethod
    def open_ended_to(cls, v):
        if isinstance(v, str) and not v.strip().isdigit():
            return None
        return v

    @field_validator("price_group", mode="before")
    @classmethod
    def default_group(cls, v):
        return v or "EK"


class CategoryRow(BaseRow):
    category_id: Optional[int] = Field(None, alias="categoryId")
    category_path: Optional[str] = Field(None, alias="categoryPath")


class ConfiguratorRow(BaseRow):
    config_set_id: Optional[int] = Field(None, alias="configSetId")
    config_set_name: Optional[str] = Field(None, alias="configSetName")
    config_set_type: Optional[int] = Field(None, ge=0, le=2, alias="configSetType")
    config_group_id: Optional[int] = Field(None, alias="configGroupId")
    config_group_name: Optional[str] = Field(None, alias="configGroupName")
    config_group_description: Optional[str] = Field(None, alias="configGroupDescription")
    config_option_id: Optional[int] = Field(None, alias="configOptionId")
    config_option_name: Optional[str] = Field(None, alias="configOptionName")
    config_option_position: Optional[int] = Field(None, alias="configOptionPosition")


class PropertyValueRow(BaseRow):
    property_group_name: Optional[str] = Field(None, alias="propertyGroupName")
    property_option_name: Optional[str] = Field(None, alias="propertyOptionName")
    property_value_id: Optional[int] = Field(None, alias="propertyValueId")
    property_value_name: Optional[str] = Field(None, alias="propertyValueName")
    property_value_position: Optional[int] = Field(None, alias="propertyValuePosition")


class TranslationRow(BaseRow):
    language_id: int = Field(..., alias="languageId")
    name: Optional[str] = None
    keywords: Optional[str] = None
    meta_title: Optional[str] = Field(None, alias="metaTitle")
    description: Optional[str] = None
    description_long: Optional[str] = Field(None, alias="descriptionLong")
    additional_text: Optional[str] = Field(None, alias="additionalText")
    pack_unit: Optional[str] = Field(None, alias="packUnit")
    shipping_time: Optional[str] = Field(None, alias="shippingTime")


class RelationRow(BaseRow):
    """Accessory or similar link; `ordernumber` addresses the target's main variant"""

    order_number: str = Field(..., min_length=1, alias="ordernumber")


class ImageRow(BaseRow):
    image_url: Optional[str] = Field(None, alias="imageUrl")
    path: Optional[str] = None
    main: Optional[int] = None
    position: Optional[int] = Field(None, ge=1)
    description: Optional[str] = None
    media_id: Optional[int] = Field(None, alias="mediaId")
    thumbnail: Optional[bool] = None

    @property
    def is_main(self) -> bool:
        return self.main == 1
