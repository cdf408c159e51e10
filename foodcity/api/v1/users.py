from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from foodcity.db.session import get_db
from foodcity.api.deps import get_current_active_user
from foodcity.models.user import User
from foodcity.models.address import Address
from foodcity.schemas.address import AddressCreate, AddressResponse
from foodcity.utils.response import success

router = APIRouter()


@router.get("/address", response_model=dict)
def get_user_addresses(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Get user's delivery addresses, default first"""
    addresses = (
        db.query(Address)
        .filter(Address.user_id == current_user.id)
        .order_by(Address.is_default.desc(), Address.id.asc())
        .all()
    )
    return success(
        data=[AddressResponse.model_validate(address).model_dump() for address in addresses],
        message="Addresses retrieved",
    )


@router.post("/address", response_model=dict, status_code=status.HTTP_201_CREATED)
def create_address(
    address_data: AddressCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Add new address"""
    # A new default replaces the old one; the first address is always default.
    has_addresses = db.query(Address.id).filter(Address.user_id == current_user.id).first() is not None
    if address_data.is_default:
        db.query(Address).filter(
            Address.user_id == current_user.id,
            Address.is_default == True
        ).update({"is_default": False})

    address = Address(
        user_id=current_user.id,
        **address_data.model_dump()
    )
    if not has_addresses:
        address.is_default = True

    db.add(address)
    db.commit()
    db.refresh(address)

    return success(data=AddressResponse.model_validate(address).model_dump(), message="Address added")


@router.delete("/address/{address_id}", response_model=dict)
def delete_address(
    address_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Delete address"""
    address = db.query(Address).filter(
        Address.id == address_id,
        Address.user_id == current_user.id
    ).first()

    if not address:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Address not found"
        )

    db.delete(address)
    db.commit()

    return success(message="Address deleted")
