"""
Module: approval_kernel.selectors.base
Responsibility: Root of the read-only query objects behind the listing views.

Selectors take a session, run SELECTs and return frozen DTOs.  They never
add, flush or commit, and never hand ORM instances to callers.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from approval_kernel.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseSelector(ABC, Generic[ModelT]):

    def __init__(self, session: Session):
        self.session = session
