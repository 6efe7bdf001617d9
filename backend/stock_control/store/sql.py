# Overview: Flask-SQLAlchemy entity store; every write commits through run_with_retry.

from __future__ import annotations

from typing import Optional

from sqlalchemy import update

from ..errors import NotFoundError
from ..extensions import db
from ..models import EmailSettings, Location, Product, Transfer, User
from ..services.concurrency import run_with_retry
from ..time_utils import utcnow
from .base import (
    EmailSettingsRepository,
    EntityStore,
    Repository,
    TransferRepository,
    UserRepository,
    check_required,
    new_transfer_id,
)


class _SqlRecords:
    """Shared reads for a db.Model exposing FIELD_COLUMNS and to_dict()."""

    def __init__(self, entity: str, label: str, model):
        self.entity = entity
        self.label = label
        self.model = model

    def _columns(self, data: dict) -> dict:
        return {
            column: data[field]
            for field, column in self.model.FIELD_COLUMNS.items()
            if field in data
        }

    def _load(self, record_id: str):
        return db.session.query(self.model).filter_by(id=record_id).first()

    def get(self, record_id: str) -> Optional[dict]:
        row = self._load(record_id)
        return row.to_dict() if row else None

    def get_all(self) -> list[dict]:
        rows = db.session.query(self.model).order_by(self.model.pk.asc()).all()
        return [row.to_dict() for row in rows]


class SqlRepository(_SqlRecords, Repository):

    def create(self, data: dict) -> dict:
        check_required(self.entity, data)

        def _op():
            row = self.model(**self._columns(data))
            db.session.add(row)
            db.session.commit()
            return row.to_dict()

        return run_with_retry(_op)

    def update(self, record_id: str, patch: dict) -> dict:
        def _op():
            row = self._load(record_id)
            if row is None:
                raise NotFoundError(self.label, record_id)
            for column, value in self._columns(patch).items():
                setattr(row, column, value)
            db.session.commit()
            return row.to_dict()

        return run_with_retry(_op)

    def delete(self, record_id: str) -> None:
        def _op():
            row = self._load(record_id)
            if row is not None:
                db.session.delete(row)
                db.session.commit()

        run_with_retry(_op)


class SqlUserRepository(SqlRepository, UserRepository):

    def __init__(self):
        super().__init__("users", "User", User)

    def get_by_email(self, email: str) -> Optional[dict]:
        # "=" on SQLite and PostgreSQL text columns is case-sensitive
        row = (
            db.session.query(User)
            .filter(User.email == email)
            .order_by(User.pk.asc())
            .first()
        )
        return row.to_dict() if row else None


class SqlTransferRepository(_SqlRecords, TransferRepository):

    def __init__(self):
        super().__init__("transfers", "Transfer", Transfer)

    def create(self, data: dict) -> dict:
        check_required(self.entity, data)

        def _op():
            row = Transfer(id=new_transfer_id(utcnow()), **self._columns(data))
            db.session.add(row)
            db.session.commit()
            return row.to_dict()

        return run_with_retry(_op)

    def transition(self, transfer_id: str, expected_status: str, changes: dict) -> Optional[dict]:
        """
        Conditional UPDATE: the WHERE clause carries the expected status, so
        of two racing writers only one matches a row.
        """
        def _op():
            stmt = (
                update(Transfer)
                .where(Transfer.id == transfer_id, Transfer.status == expected_status)
                .values(**self._columns(changes))
                .execution_options(synchronize_session=False)
            )
            result = db.session.execute(stmt)
            if not result.rowcount:
                db.session.rollback()
                if self._load(transfer_id) is None:
                    raise NotFoundError(self.label, transfer_id)
                return None
            db.session.commit()
            return self.get(transfer_id)

        return run_with_retry(_op)


class SqlEmailSettingsRepository(EmailSettingsRepository):

    def get(self) -> Optional[dict]:
        row = db.session.get(EmailSettings, "default")
        return row.to_dict() if row else None

    def save(self, data: dict) -> dict:
        def _op():
            row = db.session.get(EmailSettings, "default")
            if row is None:
                row = EmailSettings(id="default")
                db.session.add(row)
            for field, column in EmailSettings.FIELD_COLUMNS.items():
                if field in data:
                    setattr(row, column, data[field])
            row.configured = bool(row.configured)
            row.updated_at = utcnow()
            db.session.commit()
            return row.to_dict()

        return run_with_retry(_op)


def build_sql_store() -> EntityStore:
    return EntityStore(
        products=SqlRepository("products", "Product", Product),
        locations=SqlRepository("locations", "Location", Location),
        users=SqlUserRepository(),
        transfers=SqlTransferRepository(),
        email_settings=SqlEmailSettingsRepository(),
        backend="sql",
    )
