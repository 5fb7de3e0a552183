from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Contact(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    phone: str
