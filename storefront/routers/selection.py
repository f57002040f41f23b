"""
Selection Router

Last product opened in the storefront or the admin console.
"""
from fastapi import APIRouter, Depends, HTTPException

from storefront.selection import ProductSelection, SelectionScope
from .deps import get_selection
from .models import RememberSelectionRequest

router = APIRouter(tags=["selection"])


@router.get("/selection/{scope}")
def read_selection(scope: SelectionScope, selection: ProductSelection = Depends(get_selection)):
    return {"selection": selection.read(scope)}


@router.put("/selection/{scope}")
def remember_selection(
    scope: SelectionScope,
    request: RememberSelectionRequest,
    selection: ProductSelection = Depends(get_selection),
):
    stored = selection.remember(request.product, scope)
    if stored is None:
        raise HTTPException(status_code=400, detail="Product id is required")
    return {"selection": stored}


@router.delete("/selection/{scope}")
def clear_selection(scope: SelectionScope, selection: ProductSelection = Depends(get_selection)):
    selection.clear()
    return {"selection": None}
