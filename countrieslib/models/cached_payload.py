import json
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from countrieslib.models.base import Base


class CachedPayload(Base):
    __tablename__ = "cached_payloads"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    payload_json: Mapped[str] = mapped_column(Text, nullable=False)  # JSON-serialized API body
    fetched_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    @property
    def payload(self) -> Any:
        return json.loads(self.payload_json)

    @payload.setter
    def payload(self, value: Any) -> None:
        self.payload_json = json.dumps(value)
