from datetime import datetime
from pydantic import BaseModel, ConfigDict


class UserBase(BaseModel):
    email: str
    display_name: str | None = None


class User(UserBase):
    id: str
    created_at: datetime | None = None
    model_config = ConfigDict(from_attributes=True)
