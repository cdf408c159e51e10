from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from sqlalchemy import func, or_
from typing import Optional
from foodcity.db.session import get_db
from foodcity.models.product import FoodCategory, Product
from foodcity.schemas.product import ProductResponse
from foodcity.core.exceptions import ProductNotFound
from foodcity.utils.response import success
from foodcity.core.rate_limiter import limiter

router = APIRouter()


@router.get("", response_model=dict)
@router.get("/", response_model=dict)
@limiter.limit("100/minute")
def get_products(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    category: Optional[FoodCategory] = None,
    is_veg: Optional[bool] = None,
    best_seller: Optional[bool] = None,
    search: Optional[str] = Query(None, max_length=100),
    sort_by: Optional[str] = Query(None, pattern="^(price_asc|price_desc|rating|newest)$"),
    db: Session = Depends(get_db)
):
    """
    Menu listing with filtering and pagination
    """
    query = db.query(Product).filter(Product.is_available == True)

    if category:
        query = query.filter(Product.category == category)

    if is_veg is not None:
        query = query.filter(Product.is_veg == is_veg)

    if best_seller:
        query = query.filter(Product.is_best_seller == True)

    if search:
        search_term = f"%{search}%"
        query = query.filter(
            or_(
                Product.title.ilike(search_term),
                Product.description.ilike(search_term)
            )
        )

    menu_price = func.coalesce(Product.discounted_price, Product.price)
    if sort_by == "price_asc":
        query = query.order_by(menu_price.asc(), Product.id.asc())
    elif sort_by == "price_desc":
        query = query.order_by(menu_price.desc(), Product.id.asc())
    elif sort_by == "rating":
        query = query.order_by(Product.rating.desc(), Product.id.asc())
    elif sort_by == "newest":
        query = query.order_by(Product.created_at.desc(), Product.id.desc())
    else:
        query = query.order_by(Product.id.asc())

    total = query.count()
    products = query.offset((page - 1) * limit).limit(limit).all()

    return success(
        data={
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": (total + limit - 1) // limit,
            "products": [ProductResponse.model_validate(product).model_dump() for product in products],
        },
        message="Products retrieved",
    )


@router.get("/{slug}", response_model=dict)
@limiter.limit("100/minute")
def get_product_detail(request: Request, slug: str, db: Session = Depends(get_db)):
    """Single menu item by slug"""
    product = db.query(Product).filter(Product.slug == slug, Product.is_available == True).first()
    if not product:
        raise ProductNotFound()
    return success(data=ProductResponse.model_validate(product).model_dump(), message="Product retrieved")
