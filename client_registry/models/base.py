from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


class TimestampedModel(SQLModel):
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at: datetime | None = Field(default=None, nullable=True)

    def touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)


class IntIDModel(SQLModel):
    id: Optional[int] = Field(default=None, primary_key=True, index=True)
