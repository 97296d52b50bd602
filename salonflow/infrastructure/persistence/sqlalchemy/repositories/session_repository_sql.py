from datetime import datetime
from sqlmodel import Session

from .....db.models import UserSession


class SqlSessionRepository:
    def __init__(self, session: Session):
        self.session = session

    def create(self, user_id: str, token: str, refresh_token: str, expires_at: datetime) -> UserSession:
        rec = UserSession(user_id=user_id, token=token, refresh_token=refresh_token, expires_at=expires_at)
        self.session.add(rec)
        self.session.commit()
        self.session.refresh(rec)
        return rec
