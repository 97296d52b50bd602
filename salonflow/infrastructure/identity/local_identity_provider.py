import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session

from ...application.ports.identity_provider import AuthSession, IdentityProvider
from ...config import settings
from ...db.models import Customer
from ...exceptions import SessionError
from ...utils import create_jwt_token, create_refresh_token
from ..persistence.sqlalchemy.repositories.customer_repository_sql import SqlCustomerRepository
from ..persistence.sqlalchemy.repositories.session_repository_sql import SqlSessionRepository

logger = logging.getLogger(__name__)
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

PSEUDO_EMAIL_DOMAIN = "phone.salonflow.local"


def pseudo_email(phone: str) -> str:
    return f"{phone}@{PSEUDO_EMAIL_DOMAIN}"


def derive_password(phone: str, secret: str) -> str:
    """Internal sign-in credential for a phone identity; never shown to users."""
    return f"phone_{phone}_{secret[-10:]}"


class LocalIdentityProvider(IdentityProvider):
    """Phone-keyed identities stored in the customers table, signed in with JWTs."""

    def __init__(self, session: Session, secret: Optional[str] = None):
        self.session = session
        self.secret = secret or settings.IDENTITY_SERVICE_SECRET
        self.customers = SqlCustomerRepository(session)
        self.sessions = SqlSessionRepository(session)

    def resolve_session(self, phone: str) -> AuthSession:
        email = pseudo_email(phone)
        password = derive_password(phone, self.secret)
        try:
            customer = self.customers.get_by_auth_email(email)
            if customer is None:
                customer = self._create_identity(phone, email, password)
            else:
                self.customers.mark_verified(customer)
            return self._sign_in(customer, password)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Identity lookup failed: {e}")
            raise SessionError("Failed to create user session") from e

    def _create_identity(self, phone: str, email: str, password: str) -> Customer:
        metadata = {"phone": phone, "auth_type": "phone_otp"}
        try:
            customer = self.customers.create_phone_identity(phone, email, pwd_context.hash(password), metadata)
            logger.info(f"Created phone identity {customer.id}")
            return customer
        except IntegrityError:
            # A concurrent verification created it first
            self.session.rollback()
            customer = self.customers.get_by_auth_email(email)
            if customer is None:
                raise SessionError("Failed to create user session")
            return customer

    def _sign_in(self, customer: Customer, password: str) -> AuthSession:
        if not pwd_context.verify(password, customer.password_hash):
            logger.error(f"Credential mismatch for identity {customer.id}")
            raise SessionError("Failed to create session")

        lifetime = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        claims = {"sub": customer.id, "phone": customer.phone}
        try:
            access_token = create_jwt_token(claims, expires_delta=lifetime)
            refresh_token = create_refresh_token(claims)
        except ValueError as e:
            logger.error(f"Token signing failed: {e}")
            raise SessionError("Failed to create session") from e

        expires_at = datetime.utcnow() + lifetime
        self.sessions.create(customer.id, access_token, refresh_token, expires_at)
        return AuthSession(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=int(expires_at.replace(tzinfo=timezone.utc).timestamp()),
            user_id=customer.id,
            phone=customer.phone,
        )
