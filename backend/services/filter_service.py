"""
Filter and search over the materialized product catalog
Pure functions: inputs are never mutated and input order is preserved.
"""
from typing import Dict, List, Sequence
from models.inventory_models import Part, PartQuery, Product, StockCategory

# Fixed policy: a part with 0 < quantity < LOW_STOCK_THRESHOLD is low on stock.
LOW_STOCK_THRESHOLD = 5

ALL_PRODUCTS = "all"


def matches_text(part: Part, text: str) -> bool:
    """Case-insensitive substring match on name, part number or vendor"""
    if not text:
        return True
    needle = text.lower()
    return any(
        needle in (value or "").lower()
        for value in (part.name, part.part_no, part.vendor)
    )


def matches_stock(part: Part, category: StockCategory) -> bool:
    if category == StockCategory.OUT_OF_STOCK:
        return part.quantity == 0
    if category == StockCategory.LOW_STOCK:
        return 0 < part.quantity < LOW_STOCK_THRESHOLD
    if category == StockCategory.IN_STOCK:
        return part.quantity > 0
    if category == StockCategory.INCOMING:
        return part.is_new is True
    return True


def filter_parts(parts: Sequence[Part], query: PartQuery) -> List[Part]:
    """Parts matching both the text and the stock category, in input order"""
    category = StockCategory(query.stock_category)
    return [
        part for part in parts
        if matches_text(part, query.text) and matches_stock(part, category)
    ]


def filter_products(products: Sequence[Product], scope: str = ALL_PRODUCTS) -> List[Product]:
    """Products selected by name, or all of them"""
    if not scope or scope == ALL_PRODUCTS:
        return list(products)
    return [p for p in products if p.name == scope]


def get_stock_status(part: Part) -> str:
    """Display status of a part"""
    if part.is_new:
        return "new"
    if part.quantity == 0:
        return "out-of-stock"
    if part.quantity < LOW_STOCK_THRESHOLD:
        return "low-stock"
    return "in-stock"


def get_inventory_statistics(products: Sequence[Product]) -> Dict:
    """Summary counts across the catalog"""
    total_parts = 0
    total_quantity = 0
    in_stock = 0
    out_of_stock = 0
    low_stock = 0
    incoming = 0
    per_product = []

    for product in products:
        total_parts += len(product.parts)
        for part in product.parts:
            total_quantity += part.quantity
            if matches_stock(part, StockCategory.IN_STOCK):
                in_stock += 1
            if matches_stock(part, StockCategory.OUT_OF_STOCK):
                out_of_stock += 1
            if matches_stock(part, StockCategory.LOW_STOCK):
                low_stock += 1
            if matches_stock(part, StockCategory.INCOMING):
                incoming += 1

        per_product.append({
            "id": product.id,
            "name": product.name,
            "part_count": len(product.parts),
            "total_quantity": sum(p.quantity for p in product.parts),
        })

    return {
        "total_products": len(products),
        "total_parts": total_parts,
        "total_quantity": total_quantity,
        "in_stock": in_stock,
        "out_of_stock": out_of_stock,
        "low_stock": low_stock,
        "incoming": incoming,
        "products": per_product,
    }
