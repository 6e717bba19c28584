from fastapi import APIRouter, Depends, HTTPException

from storefront.api.dependencies import get_repository

router = APIRouter()


@router.get("/products", tags=["Products"])
async def list_products(repository=Depends(get_repository)):
    return {"products": [p.to_dict() for p in repository.list_products()]}


@router.get("/products/{slug}", tags=["Products"])
async def get_product(slug: str, repository=Depends(get_repository)):
    product = repository.get_product_by_slug(slug)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return {"product": product.to_dict()}
