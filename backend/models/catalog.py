"""
Fixed product catalog
Products are never created or destroyed at runtime; only their parts change.
"""
from typing import Dict, List, Optional
from models.inventory_models import CatalogEntry, Product


PRODUCT_CATALOG: tuple = (
    CatalogEntry(1, "HOPE-10000", "fas fa-microscope"),
    CatalogEntry(2, "IV POLE", "fas fa-procedures"),
    CatalogEntry(3, "FOOT-PEDAL-V3", "fas fa-shoe-prints"),
    CatalogEntry(4, "FOOT-PEDAL-V4", "fas fa-shoe-prints"),
    CatalogEntry(5, "STANDALONE-LIGHTSOURCE", "fas fa-lightbulb"),
    CatalogEntry(6, "ANT_VIT", "fas fa-capsules"),
    CatalogEntry(7, "SCREWS-M", "fas fa-cogs"),
    CatalogEntry(8, "POWDER-COAT", "fas fa-paint-roller"),
    CatalogEntry(9, "Tools", "fas fa-tools"),
)


def get_catalog_entry(product_id: int, catalog=PRODUCT_CATALOG) -> Optional[CatalogEntry]:
    return next((e for e in catalog if e.id == product_id), None)


def empty_products(catalog=PRODUCT_CATALOG) -> List[Product]:
    """Every catalog product with an empty parts list"""
    return [Product(id=e.id, name=e.name, icon=e.icon) for e in catalog]


def catalog_to_dict(catalog=PRODUCT_CATALOG) -> List[Dict]:
    return [{"id": e.id, "name": e.name, "icon": e.icon} for e in catalog]
