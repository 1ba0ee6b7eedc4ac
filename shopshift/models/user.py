"""User SQLAlchemy ORM model definition.

Local mirror of the shop's user directory. Identity comes from the external
identity provider (matched by external_id = token subject); capability tags
decide what each user may do in the scheduling workflow.

Tables:
    - users: User accounts with staff flag and capability tags
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, Boolean, DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from shopshift.database import Base


class User(Base):
    """User model: system user account information.

    Capability flags follow the shop's hierarchy: staff users may carry a
    worker tag, and workers may additionally carry a manager tag.
    The emulating_* columns let developers preview other roles; when set
    they take precedence over the real flags (see permission_service).

    Attributes:
        id: Unique identifier
        external_id: Identity provider subject, unique
        name: Display name
        email: Email address, optional
        is_active: Inactive accounts cannot authenticate
        is_staff: Base staff flag
        worker_tag: Worker capability tag
        manager_tag: Manager capability tag
        emulating_is_staff: Emulated staff flag override
        emulating_worker_tag: Emulated worker tag override
        emulating_manager_tag: Emulated manager tag override
        created_at: Creation timestamp
        updated_at: Last update timestamp
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # Identity provider subject (JWT "sub")
    external_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    is_staff: Mapped[bool] = mapped_column(Boolean, default=False)
    worker_tag: Mapped[bool] = mapped_column(Boolean, default=False)
    manager_tag: Mapped[bool] = mapped_column(Boolean, default=False)
    # Role emulation overrides (None = not emulating)
    emulating_is_staff: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    emulating_worker_tag: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    emulating_manager_tag: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
