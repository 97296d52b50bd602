# salonflow/db/models/users/session.py
from sqlmodel import SQLModel, Field
from datetime import datetime
import uuid

class UserSession(SQLModel, table=True):
    __tablename__ = "user_sessions"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    user_id: str = Field(foreign_key="customers.id", index=True)
    token: str = Field(max_length=500, index=True)
    refresh_token: str = Field(max_length=500, index=True)
    expires_at: datetime
    created_at: datetime = Field(default_factory=datetime.utcnow)
