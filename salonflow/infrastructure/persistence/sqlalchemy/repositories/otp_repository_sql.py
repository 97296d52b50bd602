import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from .....db.models import OtpRecord
from .....application.ports.otp_repo import ActiveRecordConflict, OtpRecordDto, OtpRepository
from .....exceptions import PersistenceError

logger = logging.getLogger(__name__)


class SqlOtpRepository(OtpRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, r: OtpRecord) -> OtpRecordDto:
        return OtpRecordDto(
            id=r.id,
            phone=r.phone,
            otp=r.otp,
            created_at=r.created_at,
            expires_at=r.expires_at,
            verified=r.verified,
            attempts=r.attempts,
        )

    def _get(self, record_id: str) -> OtpRecord:
        rec = self.session.get(OtpRecord, record_id)
        if rec is None:
            raise PersistenceError("OTP record disappeared")
        return rec

    def get_active(self, phone: str, now: datetime) -> Optional[OtpRecordDto]:
        try:
            rec = self.session.exec(
                select(OtpRecord)
                .where(OtpRecord.active_phone == phone)
                .where(OtpRecord.verified == False)  # noqa: E712
                .where(OtpRecord.expires_at > now)
            ).first()
        except SQLAlchemyError as e:
            logger.error(f"Error reading OTP record: {e}")
            raise PersistenceError() from e
        return self._to_dto(rec) if rec else None

    def get_latest_verified(self, phone: str, now: datetime) -> Optional[OtpRecordDto]:
        try:
            rec = self.session.exec(
                select(OtpRecord)
                .where(OtpRecord.phone == phone)
                .where(OtpRecord.expires_at > now)
                .order_by(OtpRecord.created_at.desc())
            ).first()
        except SQLAlchemyError as e:
            logger.error(f"Error reading OTP record: {e}")
            raise PersistenceError() from e
        return self._to_dto(rec) if rec and rec.verified else None

    def insert_active(self, phone: str, otp: str, created_at: datetime, expires_at: datetime) -> OtpRecordDto:
        try:
            previous = self.session.exec(select(OtpRecord).where(OtpRecord.active_phone == phone)).all()
            for old in previous:
                old.active_phone = None
                self.session.add(old)
            self.session.flush()
            rec = OtpRecord(
                phone=phone,
                otp=otp,
                created_at=created_at,
                expires_at=expires_at,
                verified=False,
                attempts=0,
                active_phone=phone,
            )
            self.session.add(rec)
            self.session.commit()
            self.session.refresh(rec)
        except IntegrityError as e:
            self.session.rollback()
            raise ActiveRecordConflict() from e
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Error storing OTP: {e}")
            raise PersistenceError("Failed to generate OTP") from e
        return self._to_dto(rec)

    def increment_attempts(self, record_id: str) -> int:
        try:
            rec = self._get(record_id)
            rec.attempts += 1
            self.session.add(rec)
            self.session.commit()
            return rec.attempts
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Error updating OTP attempts: {e}")
            raise PersistenceError() from e

    def mark_verified(self, record_id: str) -> None:
        try:
            rec = self._get(record_id)
            rec.verified = True
            rec.active_phone = None
            self.session.add(rec)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Error marking OTP verified: {e}")
            raise PersistenceError() from e
