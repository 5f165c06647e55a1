"""
Column registry for the export projections.

Each group maps export column names to SQL expressions over the entities
joined by that group's query. A column spec is a mapping
group -> list of column names taken from this registry.
"""

from typing import Dict, List
from sqlalchemy import literal
from sqlalchemy.orm import aliased

from catalog.collaborators import AttributeSchema
from catalog.translation_fields import translation_fields
from models import (
    Category,
    ConfiguratorGroup,
    ConfiguratorOption,
    ConfiguratorSet,
    CustomerGroup,
    Image,
    Price,
    Product,
    ProductRelation,
    PropertyGroup,
    PropertyOption,
    PropertyValue,
    Supplier,
    Tax,
    Unit,
    Variant,
)

# Aliased entities shared between the registry and the projection queries
main_variant = aliased(Variant, name="mv")
similar_link = aliased(ProductRelation, name="similar_link")
similar_variant = aliased(Variant, name="similar_variant")
accessory_link = aliased(ProductRelation, name="accessory_link")
accessory_variant = aliased(Variant, name="accessory_variant")

ARTICLE = "article"
PRICE = "price"
IMAGE = "image"
PROPERTY_VALUE = "propertyValue"
CONFIGURATOR = "configurator"
SIMILAR = "similar"
ACCESSORY = "accessory"
CATEGORY = "category"
TRANSLATION = "translation"

SECTIONS = [ARTICLE, PRICE, IMAGE, PROPERTY_VALUE, SIMILAR, ACCESSORY, CONFIGURATOR, CATEGORY, TRANSLATION]

PRODUCT_COLUMNS = {
    "articleId": Product.id,
    "name": Product.name,
    "description": Product.description,
    "descriptionLong": Product.description_long,
    "date": Product.added,
    "pseudoSales": Product.pseudo_sales,
    "topSeller": Product.highlight,
    "metaTitle": Product.meta_title,
    "keywords": Product.keywords,
    "changeTime": Product.changed,
    "priceGroupId": Product.price_group_id,
    "priceGroupActive": Product.price_group_active,
    "notification": Product.notification,
    "template": Product.template,
    "mode": Product.mode,
    "availableFrom": Product.available_from,
    "availableTo": Product.available_to,
    "supplierId": Supplier.id,
    "supplierName": Supplier.name,
    "taxId": Tax.id,
    "tax": Tax.tax,
    "filterGroupId": PropertyGroup.id,
    "filterGroupName": PropertyGroup.name,
}

VARIANT_COLUMNS = {
    "variantId": Variant.id,
    "orderNumber": Variant.number,
    "mainNumber": main_variant.number,
    "kind": Variant.kind,
    "additionalText": Variant.additional_text,
    "inStock": Variant.in_stock,
    "active": Variant.active,
    "stockMin": Variant.stock_min,
    "lastStock": Variant.last_stock,
    "weight": Variant.weight,
    "position": Variant.position,
    "width": Variant.width,
    "height": Variant.height,
    "length": Variant.length,
    "ean": Variant.ean,
    "unitId": Variant.unit_id,
    "unit": Unit.unit,
    "purchaseSteps": Variant.purchase_steps,
    "minPurchase": Variant.min_purchase,
    "maxPurchase": Variant.max_purchase,
    "purchaseUnit": Variant.purchase_unit,
    "referenceUnit": Variant.reference_unit,
    "packUnit": Variant.pack_unit,
    "releaseDate": Variant.release_date,
    "shippingTime": Variant.shipping_time,
    "shippingFree": Variant.shipping_free,
    "supplierNumber": Variant.supplier_number,
    "purchasePrice": Variant.purchase_price,
}

REGISTRY = {
    ARTICLE: {**PRODUCT_COLUMNS, **VARIANT_COLUMNS},
    PRICE: {
        "variantId": Price.variant_id,
        "articleId": Price.product_id,
        "price": Price.price,
        "pseudoPrice": Price.pseudo_price,
        "regulationPrice": Price.regulation_price,
        "priceGroup": Price.customer_group_key,
        "from": Price.quantity_from,
        "to": Price.quantity_to,
    },
    IMAGE: {
        "id": Image.id,
        "articleId": Image.product_id,
        "variantId": Image.variant_id,
        "path": Image.path,
        "imageUrl": literal("media/image/") + Image.path + literal(".") + Image.extension,
        "main": Image.main,
        "mediaId": Image.media_id,
        "position": Image.position,
        "description": Image.description,
        "thumbnail": literal("1"),
    },
    PROPERTY_VALUE: {
        "articleId": Product.id,
        "propertyGroupName": PropertyGroup.name,
        "propertyValueId": PropertyValue.id,
        "propertyValueName": PropertyValue.value,
        "propertyValuePosition": PropertyValue.position,
        "propertyOptionName": PropertyOption.name,
    },
    CONFIGURATOR: {
        "variantId": Variant.id,
        "configOptionId": ConfiguratorOption.id,
        "configOptionName": ConfiguratorOption.name,
        "configOptionPosition": ConfiguratorOption.position,
        "configGroupId": ConfiguratorGroup.id,
        "configGroupName": ConfiguratorGroup.name,
        "configGroupDescription": ConfiguratorGroup.description,
        "configSetId": ConfiguratorSet.id,
        "configSetName": ConfiguratorSet.name,
        "configSetType": ConfiguratorSet.type,
    },
    SIMILAR: {
        "similarId": similar_link.related_product_id,
        "ordernumber": similar_variant.number,
        "articleId": Product.id,
    },
    ACCESSORY: {
        "accessoryId": accessory_link.related_product_id,
        "ordernumber": accessory_variant.number,
        "articleId": Product.id,
    },
    CATEGORY: {
        "categoryId": Category.id,
        "categoryPath": Category.path,
        "articleId": Product.id,
    },
}

# Columns every row of a group carries to find its owner
PARENT_KEYS = {
    ARTICLE: ["articleId", "variantId", "orderNumber"],
    PRICE: ["variantId"],
    PROPERTY_VALUE: ["articleId"],
    SIMILAR: ["articleId"],
    ACCESSORY: ["articleId"],
    IMAGE: ["articleId"],
    CATEGORY: ["articleId"],
    CONFIGURATOR: ["variantId"],
    TRANSLATION: ["variantId"],
}

TRANSLATION_IDENTITY = ["articleId", "variantId", "languageId", "variantKind"]

# Price columns needed for gross computation, dropped from the output
PRICE_HELPER_COLUMNS = {
    "taxInput": CustomerGroup.tax_input,
    "taxRate": Tax.tax,
}


def group_columns(group: str, schema: AttributeSchema) -> Dict[str, object]:
    """Column name -> expression (or attribute column name) available for a group"""
    if group == TRANSLATION:
        names = TRANSLATION_IDENTITY + list(translation_fields(schema).values())
        return {name: name for name in names}

    columns = dict(REGISTRY[group])
    if group == ARTICLE:
        columns.update(schema.aliases(schema.variant_table))
    return columns


def get_default_columns(schema: AttributeSchema) -> Dict[str, List[str]]:
    return {group: list(group_columns(group, schema)) for group in SECTIONS}
