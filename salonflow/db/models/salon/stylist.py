# salonflow/db/models/salon/stylist.py
from typing import Optional, List, Dict
from sqlmodel import SQLModel, Field, Column, JSON
from datetime import datetime, date
import uuid

class Stylist(SQLModel, table=True):
    __tablename__ = "stylists"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    name: str = Field(max_length=100)
    phone: Optional[str] = Field(default=None, max_length=20)
    role: str = Field(default="Stylist", max_length=20)
    # Service ids this stylist can perform
    specializations: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    # Weekday names, e.g. ["Monday", "Tuesday"]
    working_days: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    # {"start": "09:00", "end": "18:00"}; NULL falls back to business hours
    working_hours: Optional[Dict[str, str]] = Field(default=None, sa_column=Column(JSON))
    is_active: bool = Field(default=True)
    is_emergency_unavailable: bool = Field(default=False)
    created_at: datetime = Field(default_factory=datetime.utcnow)

class StylistBreak(SQLModel, table=True):
    __tablename__ = "stylist_breaks"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    stylist_id: str = Field(foreign_key="stylists.id", index=True)
    # 0 = Monday .. 6 = Sunday; NULL applies to every day
    day_of_week: Optional[int] = Field(default=None, ge=0, le=6)
    start_time: str = Field(max_length=5)
    end_time: str = Field(max_length=5)
    break_type: str = Field(default="Other", max_length=20)
    is_recurring: bool = Field(default=True)
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

class StylistUnavailability(SQLModel, table=True):
    __tablename__ = "stylist_unavailability"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    stylist_id: str = Field(foreign_key="stylists.id", index=True)
    unavailable_date: date = Field(index=True)
    # Both NULL means the whole day
    start_time: Optional[str] = Field(default=None, max_length=5)
    end_time: Optional[str] = Field(default=None, max_length=5)
    reason: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
