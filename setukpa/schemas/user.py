# setukpa/schemas/user.py
from pydantic import BaseModel, EmailStr
from datetime import datetime

from setukpa.models.enums import Role


class UserCreate(BaseModel):
    """Admin creates any kind of account"""
    email: EmailStr
    password: str
    name: str
    role: Role
    nosis: str | None = None
    batch_id: int | None = None
    pembimbing_id: int | None = None

    model_config = {"use_enum_values": True}


class AdvisorAssign(BaseModel):
    pembimbing_id: int | None = None


class ExaminerAssign(BaseModel):
    examiner_id: int


class BatchCreate(BaseModel):
    name: str
    start_date: datetime | None = None
    end_date: datetime | None = None
    is_active: bool = True


class BatchPublic(BatchCreate):
    id: int

    model_config = {"from_attributes": True}
