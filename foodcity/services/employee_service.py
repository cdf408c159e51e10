from typing import List, Optional

import structlog
from fastapi import HTTPException, status
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from foodcity.core.exceptions import EmployeeNotFound
from foodcity.models.employee import Employee
from foodcity.schemas.employee import EmployeeCreate, EmployeeUpdate

logger = structlog.get_logger()

DUPLICATE_EMPLOYEE = "Employee with this email or phone number already exists"


class EmployeeService:

    @staticmethod
    def _ensure_unique(db: Session, email: Optional[str], phone: Optional[str], whatsapp: Optional[str], exclude_id: int = None) -> None:
        clauses = []
        if email:
            clauses.append(Employee.email == email)
        for number in (phone, whatsapp):
            if number:
                clauses.extend([Employee.phone == number, Employee.whatsapp == number])
        if not clauses:
            return

        query = db.query(Employee.id).filter(or_(*clauses))
        if exclude_id is not None:
            query = query.filter(Employee.id != exclude_id)
        if query.first():
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=DUPLICATE_EMPLOYEE)

    @staticmethod
    def _commit(db: Session) -> None:
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=DUPLICATE_EMPLOYEE)

    @staticmethod
    def get(db: Session, employee_id: int) -> Employee:
        employee = db.query(Employee).filter(Employee.id == employee_id).first()
        if not employee:
            raise EmployeeNotFound()
        return employee

    @staticmethod
    def list(db: Session) -> List[Employee]:
        return db.query(Employee).order_by(Employee.name.asc(), Employee.id.asc()).all()

    @staticmethod
    def create(db: Session, employee_in: EmployeeCreate) -> Employee:
        email = employee_in.email.lower() if employee_in.email else None
        EmployeeService._ensure_unique(db, email, employee_in.phone, employee_in.whatsapp)

        employee = Employee(**employee_in.model_dump(exclude={"email"}), email=email)
        db.add(employee)
        EmployeeService._commit(db)
        db.refresh(employee)

        logger.info("employee_created", employee_id=employee.id)
        return employee

    @staticmethod
    def update(db: Session, employee_id: int, employee_in: EmployeeUpdate) -> Employee:
        employee = EmployeeService.get(db, employee_id)
        updates = employee_in.model_dump(exclude_unset=True)
        if updates.get("email"):
            updates["email"] = updates["email"].lower()

        EmployeeService._ensure_unique(
            db,
            updates.get("email"),
            updates.get("phone"),
            updates.get("whatsapp"),
            exclude_id=employee.id,
        )
        for key, value in updates.items():
            setattr(employee, key, value)

        EmployeeService._commit(db)
        db.refresh(employee)
        return employee

    @staticmethod
    def delete(db: Session, employee_id: int) -> None:
        employee = EmployeeService.get(db, employee_id)
        db.delete(employee)
        db.commit()
        logger.info("employee_deleted", employee_id=employee_id)
