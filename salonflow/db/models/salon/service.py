# salonflow/db/models/salon/service.py
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime
import uuid

class Service(SQLModel, table=True):
    __tablename__ = "services"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    name: str = Field(max_length=100)
    category: str = Field(max_length=30, index=True)
    price: float = Field(default=0.0)
    duration: int = Field(description="Duration in minutes")
    gender: Optional[str] = Field(default=None, max_length=10)
    description: Optional[str] = None
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
