from fastapi import Depends, FastAPI, Header, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from typing import Optional
import logging
import threading
from config import Config
from database.store import create_store
from models.catalog import catalog_to_dict
from models.errors import AuthorizationError, DuplicatePartNoError, SyncError, ValidationError
from models.inventory_models import PartQuery, StockCategory, User
from services.filter_service import get_stock_status
from services.inventory_service import InventoryService
from services.sync_service import SyncCoordinator

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Parts Inventory API",
    description="Product parts inventory with remote store synchronization",
    version="1.0.0"
)

# CORS for React frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

_inventory: Optional[InventoryService] = None
_inventory_lock = threading.Lock()


def get_inventory_service() -> InventoryService:
    """Single inventory service instance, loaded on first use"""
    global _inventory
    with _inventory_lock:
        if _inventory is None:
            coordinator = SyncCoordinator(create_store())
            coordinator.load()
            _inventory = InventoryService(coordinator)
        return _inventory


def get_current_user(
    x_user_email: Optional[str] = Header(default=None),
    inventory: InventoryService = Depends(get_inventory_service),
) -> Optional[User]:
    """Resolve the session user from the X-User-Email header"""
    if not x_user_email:
        return None
    try:
        row = inventory.coordinator.store.get_user(x_user_email)
    except Exception as e:
        logger.error(f"API: User lookup failed - {e}")
        raise HTTPException(status_code=502, detail="User lookup failed")
    if row is None:
        return None
    return User(id=str(row["id"]), name=row["name"], email=row["email"], role=row.get("role") or "staff")


def require_user(user: Optional[User] = Depends(get_current_user)) -> User:
    if user is None:
        raise HTTPException(status_code=401, detail="Login required")
    return user


class PartRequest(BaseModel):
    name: str
    partNo: str
    vendor: str
    quantity: int = 0


class QuantityRequest(BaseModel):
    delta: int


def raise_http_error(action: str, e: Exception):
    """Map inventory errors to HTTP responses"""
    if isinstance(e, DuplicatePartNoError):
        raise HTTPException(status_code=409, detail=str(e))
    if isinstance(e, ValidationError):
        raise HTTPException(status_code=400, detail=str(e))
    if isinstance(e, AuthorizationError):
        raise HTTPException(status_code=403, detail=str(e))
    if isinstance(e, KeyError):
        raise HTTPException(status_code=404, detail=str(e.args[0]) if e.args else "Not found")
    if isinstance(e, SyncError):
        logger.error(f"API: {action} failed - {e}")
        raise HTTPException(status_code=502, detail=str(e))
    logger.error(f"API: {action} failed - {e}", exc_info=True)
    raise HTTPException(status_code=500, detail=str(e))


def products_response(products):
    return {"products": [p.to_dict() for p in products], "count": len(products)}


@app.get("/")
def root():
    return {"status": "running", "service": "Parts Inventory"}


@app.get("/api/catalog")
def get_catalog():
    """Fixed product catalog"""
    return {"catalog": catalog_to_dict()}


@app.get("/api/products")
def list_products(
    product: str = "all",
    q: str = "",
    stock: str = "all",
    user: User = Depends(require_user),
    inventory: InventoryService = Depends(get_inventory_service),
):
    """Products in scope with their parts filtered by text and stock category"""
    try:
        query = PartQuery(text=q, stock_category=StockCategory(stock))
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown stock category: '{stock}'")

    results = inventory.search(product, query)
    return {
        "products": [
            {
                "id": p.id,
                "name": p.name,
                "icon": p.icon,
                "total_parts": len(p.parts),
                "parts": [dict(part.to_dict(), status=get_stock_status(part)) for part in parts],
            }
            for p, parts in results
        ],
        "count": len(results),
    }


@app.get("/api/products/{product_id}")
def get_product(
    product_id: int,
    user: User = Depends(require_user),
    inventory: InventoryService = Depends(get_inventory_service),
):
    try:
        return inventory.get_product(product_id).to_dict()
    except Exception as e:
        raise_http_error("Get product", e)


@app.post("/api/products/{product_id}/parts", status_code=201)
def add_part(
    product_id: int,
    body: PartRequest,
    user: User = Depends(require_user),
    inventory: InventoryService = Depends(get_inventory_service),
):
    try:
        logger.info(f"API: Add part requested for product {product_id}")
        products = inventory.add_part(user, product_id, body.name, body.partNo,
                                      body.vendor, body.quantity)
        return products_response(products)
    except Exception as e:
        raise_http_error("Add part", e)


@app.put("/api/products/{product_id}/parts/{part_id}")
def edit_part(
    product_id: int,
    part_id: str,
    body: PartRequest,
    user: User = Depends(require_user),
    inventory: InventoryService = Depends(get_inventory_service),
):
    try:
        products = inventory.edit_part(user, product_id, part_id, body.name, body.partNo,
                                       body.vendor, body.quantity)
        return products_response(products)
    except Exception as e:
        raise_http_error("Edit part", e)


@app.delete("/api/products/{product_id}/parts/{part_id}")
def delete_part(
    product_id: int,
    part_id: str,
    user: User = Depends(require_user),
    inventory: InventoryService = Depends(get_inventory_service),
):
    try:
        products = inventory.delete_part(user, product_id, part_id)
        return products_response(products)
    except Exception as e:
        raise_http_error("Delete part", e)


@app.post("/api/products/{product_id}/parts/{part_id}/quantity")
def adjust_quantity(
    product_id: int,
    part_id: str,
    body: QuantityRequest,
    user: User = Depends(require_user),
    inventory: InventoryService = Depends(get_inventory_service),
):
    try:
        products = inventory.adjust_quantity(user, product_id, part_id, body.delta)
        return products_response(products)
    except Exception as e:
        raise_http_error("Adjust quantity", e)


@app.post("/api/refresh")
def refresh(
    user: User = Depends(require_user),
    inventory: InventoryService = Depends(get_inventory_service),
):
    """Re-fetch every part from the remote store"""
    try:
        return products_response(inventory.refresh())
    except Exception as e:
        raise_http_error("Refresh", e)


@app.get("/api/stats")
def get_statistics(
    user: User = Depends(require_user),
    inventory: InventoryService = Depends(get_inventory_service),
):
    return inventory.get_statistics()


@app.get("/api/sync/history")
def get_sync_history(
    user: User = Depends(require_user),
    inventory: InventoryService = Depends(get_inventory_service),
):
    return {"history": inventory.get_sync_history(20)}


@app.on_event("startup")
def startup():
    """Validate configuration on startup"""
    Config.validate()
    logger.info("API server started")


@app.on_event("shutdown")
def shutdown():
    """Cleanup on shutdown"""
    if _inventory is not None:
        _inventory.coordinator.store.close()
    logger.info("API server stopped")
