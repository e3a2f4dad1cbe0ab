from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db import Base


class User(Base):
    """Login account; ``role_id`` is the faculty/department id carried in sessions."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    user_type: Mapped[int] = mapped_column(Integer, nullable=False)
    role_id: Mapped[int | None] = mapped_column(Integer, index=True)
