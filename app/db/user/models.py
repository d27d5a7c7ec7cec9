from datetime import datetime, timezone

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field

USERS_COLLECTION = "users"


class User(BaseModel):
    """Пользователь, как он хранится в коллекции users"""
    model_config = ConfigDict(arbitrary_types_allowed=True, populate_by_name=True)

    id: ObjectId | None = Field(default=None, alias="_id")
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email_id: str = Field(min_length=1)
    password: str = Field(min_length=1, repr=False)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_document(self) -> dict:
        return self.model_dump(exclude={"id"})

    def to_public(self) -> dict:
        return {
            "id": str(self.id) if self.id else None,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email_id": self.email_id,
            "created_at": self.created_at.isoformat(),
        }
