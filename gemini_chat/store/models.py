from datetime import UTC, datetime

from sqlmodel import Field, SQLModel


class Message(SQLModel, table=True):
    """A single chat turn owned by one user.

    Messages are never updated. A user's history can only grow or be
    cleared as a whole.
    """

    __tablename__ = "messages"

    id: int | None = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    content: str = ""
    is_from_assistant: bool = False
    image_url: str | None = None  # data-URI, user turns only
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC), index=True)
