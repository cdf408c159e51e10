import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date
from slugify import slugify
from foodcity.db.session import get_db
from foodcity.api.deps import require_admin
from foodcity.core.exceptions import AddonNotFound, OrderNotFound, ProductNotFound, UserNotFound
from foodcity.core.rate_limiter import limiter
from foodcity.models.addon import AddOn
from foodcity.models.order import Order, OrderStatus
from foodcity.models.product import Product
from foodcity.models.job_application import ApplicationStatus, JobPosition
from foodcity.models.user import User, UserRole
from foodcity.schemas.addon import AddonCreate, AddonResponse, AddonUpdate
from foodcity.schemas.company import CompanySettingsResponse, CompanySettingsUpdate
from foodcity.schemas.employee import EmployeeCreate, EmployeeResponse, EmployeeUpdate
from foodcity.schemas.job_application import JobApplicationResponse, JobApplicationStatusUpdate
from foodcity.schemas.order_tracking import OrderStatusUpdate
from foodcity.schemas.product import ProductCreate, ProductResponse, ProductUpdate
from foodcity.schemas.user import UserResponse
from foodcity.services import company_service, dashboard_service, order_service
from foodcity.services.employee_service import EmployeeService
from foodcity.services.job_application_service import JobApplicationService
from foodcity.services.order_service import OrderTrackingService, serialize_order
from foodcity.utils.response import paginated_response, success

router = APIRouter()
logger = structlog.get_logger()


def _normalize_slug(value: str) -> str:
    normalized = slugify(value)
    if not normalized:
        raise HTTPException(status_code=400, detail="Slug cannot be empty")
    return normalized


def _unique_slug(db: Session, base: str, exclude_id: Optional[int] = None) -> str:
    slug = base
    suffix = 2
    while True:
        query = db.query(Product.id).filter(Product.slug == slug)
        if exclude_id is not None:
            query = query.filter(Product.id != exclude_id)
        if query.first() is None:
            return slug
        slug = f"{base}-{suffix}"
        suffix += 1


def _dump_options(options):
    return [option.model_dump() for option in options]


# ============= PRODUCTS =============

@router.post("/products", status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_product(
    request: Request,
    product_data: ProductCreate,
    current_admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Admin: Create menu item"""
    slug = _unique_slug(db, _normalize_slug(product_data.slug or product_data.title))

    values = product_data.model_dump(exclude={"slug", "customizable_options"})
    product = Product(
        slug=slug,
        customizable_options=_dump_options(product_data.customizable_options),
        **values,
    )
    db.add(product)
    db.commit()
    db.refresh(product)

    logger.info("product_created", product_id=product.id, slug=product.slug)
    return success(
        data=ProductResponse.model_validate(product).model_dump(),
        message="Product created successfully",
    )


@router.put("/products/{product_id}")
@limiter.limit("30/minute")
def update_product(
    request: Request,
    product_id: int,
    product_data: ProductUpdate,
    current_admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Admin: Update menu item"""
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise ProductNotFound()

    updates = product_data.model_dump(exclude_unset=True)
    if "customizable_options" in updates:
        updates["customizable_options"] = _dump_options(product_data.customizable_options or [])
    if updates.get("title"):
        product.slug = _unique_slug(db, _normalize_slug(updates["title"]), exclude_id=product.id)

    for key, value in updates.items():
        setattr(product, key, value)

    if product.discounted_price is not None and product.price is not None and product.discounted_price > product.price:
        db.rollback()
        raise HTTPException(status_code=400, detail="Discounted price cannot exceed price")

    db.commit()
    db.refresh(product)

    return success(
        data=ProductResponse.model_validate(product).model_dump(),
        message="Product updated successfully",
    )


@router.delete("/products/{product_id}")
@limiter.limit("20/minute")
def delete_product(
    request: Request,
    product_id: int,
    current_admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Admin: Take a menu item off the menu (soft delete)"""
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise ProductNotFound()

    product.is_available = False
    db.commit()

    return success(message="Product deleted successfully")


# ============= ADD-ONS =============

@router.post("/addons", status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_addon(
    request: Request,
    addon_data: AddonCreate,
    current_admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Admin: Create add-on"""
    values = addon_data.model_dump(exclude={"customizable_options"})
    addon = AddOn(customizable_options=_dump_options(addon_data.customizable_options), **values)
    db.add(addon)
    db.commit()
    db.refresh(addon)

    logger.info("addon_created", addon_id=addon.id)
    return success(data=AddonResponse.model_validate(addon).model_dump(), message="Add-on created successfully")


@router.put("/addons/{addon_id}")
@limiter.limit("30/minute")
def update_addon(
    request: Request,
    addon_id: int,
    addon_data: AddonUpdate,
    current_admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Admin: Update add-on"""
    addon = db.query(AddOn).filter(AddOn.id == addon_id).first()
    if not addon:
        raise AddonNotFound()

    updates = addon_data.model_dump(exclude_unset=True)
    if "customizable_options" in updates:
        updates["customizable_options"] = _dump_options(addon_data.customizable_options or [])
    for key, value in updates.items():
        setattr(addon, key, value)

    db.commit()
    db.refresh(addon)

    return success(data=AddonResponse.model_validate(addon).model_dump(), message="Add-on updated successfully")


@router.delete("/addons/{addon_id}")
@limiter.limit("20/minute")
def delete_addon(
    request: Request,
    addon_id: int,
    current_admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Admin: Retire add-on (soft delete)"""
    addon = db.query(AddOn).filter(AddOn.id == addon_id).first()
    if not addon:
        raise AddonNotFound()

    addon.is_available = False
    db.commit()

    return success(message="Add-on deleted successfully")


# ============= ORDERS =============

@router.get("/orders")
@limiter.limit("60/minute")
def get_all_orders(
    request: Request,
    status: Optional[OrderStatus] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Admin: Get all orders"""
    orders, total = order_service.list_orders(db, status, skip=(page - 1) * limit, limit=limit)

    return paginated_response(
        [serialize_order(order) for order in orders],
        total=total,
        page=page,
        limit=limit,
        message="Orders retrieved successfully",
    )


@router.get("/orders/{order_id}")
@limiter.limit("60/minute")
def get_order_detail_admin(
    request: Request,
    order_id: int,
    current_admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Admin: Get order details"""
    order = db.query(Order).filter(Order.id == order_id).first()
    if not order:
        raise OrderNotFound()

    data = serialize_order(order)
    data["payment"] = {
        "method": order.payment.payment_method.value if order.payment else None,
        "status": order.payment.payment_status.value if order.payment else None,
        "razorpay_order_id": order.payment.razorpay_order_id if order.payment else None,
    }
    data["status_history"] = [
        {
            "old_status": entry.old_status,
            "new_status": entry.new_status,
            "changed_by": entry.changed_by,
            "notes": entry.notes,
            "created_at": entry.created_at,
        }
        for entry in order.status_history
    ]
    return success(data=data, message="Order details retrieved successfully")


@router.put(
    "/orders/{order_id}/status",
    summary="Update order status (admin)",
    responses={
        200: {"description": "Order status updated successfully"},
        400: {"description": "Order already delivered or cancelled"},
        403: {"description": "Admin access required"},
        404: {"description": "Order not found"},
    },
)
@limiter.limit("30/minute")
def update_order_status(
    request: Request,
    order_id: int,
    status_update: OrderStatusUpdate,
    current_admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Admin: Update order status"""
    order = OrderTrackingService.update_order_status(db, order_id, status_update, current_admin.id)
    return success(
        data={"order_id": order.id, "status": order.status.value},
        message="Order status updated successfully",
    )


# ============= DASHBOARD =============

@router.get("/dashboard")
@limiter.limit("60/minute")
def get_dashboard(
    request: Request,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    current_admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Admin: Sales dashboard for a date range (last 30 days by default)"""
    data = dashboard_service.build_dashboard(db, start_date=start_date, end_date=end_date)
    return success(data=data, message="Dashboard data retrieved successfully")


# ============= USERS =============

@router.get("/users")
@limiter.limit("60/minute")
def get_all_users(
    request: Request,
    search: Optional[str] = Query(None, max_length=100),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Admin: List customer accounts"""
    query = db.query(User).filter(User.role == UserRole.CUSTOMER)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(
            User.full_name.ilike(pattern) | User.email.ilike(pattern) | User.phone.ilike(pattern)
        )

    total = query.count()
    users = query.order_by(User.created_at.desc(), User.id.desc()).offset((page - 1) * limit).limit(limit).all()

    return paginated_response(
        [UserResponse.model_validate(user).model_dump() for user in users],
        total=total,
        page=page,
        limit=limit,
        message="Users retrieved successfully",
    )


@router.patch("/users/{user_id}/block")
@limiter.limit("30/minute")
def toggle_user_block(
    request: Request,
    user_id: int,
    current_admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Admin: Block or unblock a customer account"""
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise UserNotFound()
    if user.is_admin:
        raise HTTPException(status_code=400, detail="Admin accounts cannot be blocked")

    user.is_blocked = not user.is_blocked
    db.commit()
    db.refresh(user)

    logger.info("user_block_toggled", user_id=user.id, is_blocked=user.is_blocked, admin_user_id=current_admin.id)
    return success(
        data=UserResponse.model_validate(user).model_dump(),
        message="User blocked successfully" if user.is_blocked else "User unblocked successfully",
    )


# ============= EMPLOYEES =============

@router.get("/employees")
@limiter.limit("60/minute")
def get_employees(
    request: Request,
    current_admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Admin: List employees"""
    employees = EmployeeService.list(db)
    return success(
        data=[EmployeeResponse.model_validate(employee).model_dump() for employee in employees],
        message="Employees retrieved successfully",
    )


@router.post("/employees", status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_employee(
    request: Request,
    employee_data: EmployeeCreate,
    current_admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Admin: Add employee"""
    employee = EmployeeService.create(db, employee_data)
    return success(
        data=EmployeeResponse.model_validate(employee).model_dump(),
        message="Employee created successfully",
    )


@router.get("/employees/{employee_id}")
@limiter.limit("60/minute")
def get_employee(
    request: Request,
    employee_id: int,
    current_admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    employee = EmployeeService.get(db, employee_id)
    return success(data=EmployeeResponse.model_validate(employee).model_dump())


@router.put("/employees/{employee_id}")
@limiter.limit("30/minute")
def update_employee(
    request: Request,
    employee_id: int,
    employee_data: EmployeeUpdate,
    current_admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Admin: Update employee"""
    employee = EmployeeService.update(db, employee_id, employee_data)
    return success(
        data=EmployeeResponse.model_validate(employee).model_dump(),
        message="Employee updated successfully",
    )


@router.delete("/employees/{employee_id}")
@limiter.limit("30/minute")
def delete_employee(
    request: Request,
    employee_id: int,
    current_admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Admin: Remove employee"""
    EmployeeService.delete(db, employee_id)
    return success(message="Employee deleted successfully")


# ============= COMPANY =============

@router.get("/company")
@limiter.limit("60/minute")
def get_company_settings(
    request: Request,
    current_admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    settings_row = company_service.get_company_settings(db)
    return success(
        data=CompanySettingsResponse.model_validate(settings_row).model_dump(),
        message="Company settings retrieved successfully",
    )


@router.put("/company")
@limiter.limit("30/minute")
def update_company_settings(
    request: Request,
    settings_data: CompanySettingsUpdate,
    current_admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Admin: Update restaurant profile"""
    settings_row = company_service.update_company_settings(db, settings_data, current_admin.id)
    return success(
        data=CompanySettingsResponse.model_validate(settings_row).model_dump(),
        message="Company settings updated successfully",
    )


# ============= JOB APPLICATIONS =============

@router.get("/job-applications")
@limiter.limit("60/minute")
def get_job_applications(
    request: Request,
    position: Optional[JobPosition] = None,
    application_status: Optional[ApplicationStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Admin: List job applications"""
    applications, total = JobApplicationService.list(
        db,
        position=position,
        application_status=application_status,
        skip=(page - 1) * limit,
        limit=limit,
    )
    return paginated_response(
        [JobApplicationResponse.model_validate(item).model_dump() for item in applications],
        total=total,
        page=page,
        limit=limit,
        message="Job applications retrieved successfully",
    )


@router.get("/job-applications/{application_id}")
@limiter.limit("60/minute")
def get_job_application(
    request: Request,
    application_id: int,
    current_admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    application = JobApplicationService.get(db, application_id)
    return success(data=JobApplicationResponse.model_validate(application).model_dump())


@router.put("/job-applications/{application_id}/status")
@limiter.limit("30/minute")
def update_job_application_status(
    request: Request,
    application_id: int,
    status_update: JobApplicationStatusUpdate,
    current_admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Admin: Move an application through review"""
    application = JobApplicationService.update_status(db, application_id, status_update, current_admin.id)
    return success(
        data=JobApplicationResponse.model_validate(application).model_dump(),
        message="Job application status updated successfully",
    )


@router.delete("/job-applications/{application_id}")
@limiter.limit("30/minute")
def delete_job_application(
    request: Request,
    application_id: int,
    current_admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    JobApplicationService.delete(db, application_id)
    return success(message="Job application deleted successfully")
