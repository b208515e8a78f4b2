"""
Catalog Module - JSON API
===========================
Public product reads + admin-gated create / update / soft-delete / restore.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from config.database import get_db
from modules.auth.deps import require_admin
from modules.catalog.service import product_service

router = APIRouter(prefix="/api/products", tags=["products"])


@router.get("")
async def list_products(db: Session = Depends(get_db)):
    return [p.to_dict() for p in product_service.list_active(db)]


@router.get("/{product_id}")
async def get_product(product_id: int, db: Session = Depends(get_db)):
    p = product_service.get_active(db, product_id)
    if not p:
        raise HTTPException(404, "Product not found")
    return p.to_dict()


@router.post("")
async def create_product(
    data: Optional[Dict[str, Any]] = None,
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
):
    product = product_service.create(db, data or {})
    db.commit()
    return JSONResponse(product.to_dict(), status_code=201)


@router.api_route("/{product_id}", methods=["PUT", "PATCH"])
async def update_product(
    product_id: int,
    data: Optional[Dict[str, Any]] = None,
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
):
    product = product_service.update(db, product_id, data or {})
    db.commit()
    return product.to_admin_dict()


@router.delete("/{product_id}", status_code=204)
async def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
):
    product_service.soft_delete(db, product_id)
    db.commit()
    return Response(status_code=204)


@router.post("/{product_id}/restore")
async def restore_product(
    product_id: int,
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
):
    product = product_service.restore(db, product_id)
    db.commit()
    return product.to_admin_dict()
