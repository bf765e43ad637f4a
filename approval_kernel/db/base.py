"""
Module: approval_kernel.db.base
Responsibility: Declarative roots shared by every approval_kernel table.
Architecture position: Kernel > DB.  Imported by every module in models/;
    imports nothing from the kernel itself.

Conventions:
    - Surrogate integer ``id`` on every table.  BIGINT on PostgreSQL; plain
      INTEGER on SQLite, the only type SQLite autoincrements as a rowid alias.
    - ``datetime`` annotations map to timezone-aware columns.
    - ``int`` annotations (tenant ids, user ids, foreign keys) share the
      primary-key type so joins never mix widths.
"""

from datetime import datetime
from typing import ClassVar

from sqlalchemy import BigInteger, DateTime, Integer, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

IdentityInteger = BigInteger().with_variant(Integer(), "sqlite")


class Base(DeclarativeBase):
    type_annotation_map: ClassVar[dict] = {
        datetime: DateTime(timezone=True),
        int: IdentityInteger,
    }

    id: Mapped[int] = mapped_column(IdentityInteger, primary_key=True, autoincrement=True)


class TrackedBase(Base):
    """
    Adds ``created_at`` / ``updated_at``, both maintained by the database.

    Rows whose creation time is part of a returned DTO (approval requests,
    assignments) get ``created_at`` from the service's Clock instead of the
    server default.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False,
    )
