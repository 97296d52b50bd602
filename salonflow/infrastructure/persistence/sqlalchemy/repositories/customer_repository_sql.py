from datetime import datetime
from typing import Optional, Dict, Any
from sqlmodel import Session, select

from .....db.models import Customer


class SqlCustomerRepository:
    def __init__(self, session: Session):
        self.session = session

    def get_by_auth_email(self, auth_email: str) -> Optional[Customer]:
        return self.session.exec(select(Customer).where(Customer.auth_email == auth_email)).first()

    def create_phone_identity(self, phone: str, auth_email: str, password_hash: str, metadata: Dict[str, Any]) -> Customer:
        customer = Customer(
            phone=phone,
            auth_email=auth_email,
            password_hash=password_hash,
            auth_type="phone_otp",
            phone_verified=True,
            user_metadata=metadata,
        )
        self.session.add(customer)
        self.session.commit()
        self.session.refresh(customer)
        return customer

    def mark_verified(self, customer: Customer) -> None:
        if customer.phone_verified:
            return
        customer.phone_verified = True
        customer.updated_at = datetime.utcnow()
        self.session.add(customer)
        self.session.commit()
