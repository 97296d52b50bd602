# salonflow/db/models/users/customer.py
from typing import Optional, Dict, Any
from sqlmodel import SQLModel, Field, Column, JSON
from datetime import datetime
import uuid

class Customer(SQLModel, table=True):
    __tablename__ = "customers"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    name: Optional[str] = Field(max_length=100, default=None)
    phone: str = Field(max_length=20, unique=True, index=True)
    email: Optional[str] = Field(max_length=100, default=None)
    # Identity used for session sign-in: "<phone>@phone.salonflow.local"
    auth_email: str = Field(max_length=120, unique=True, index=True)
    password_hash: str = Field(max_length=255)
    auth_type: str = Field(default="phone_otp", max_length=20)
    phone_verified: bool = Field(default=False)
    user_metadata: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
