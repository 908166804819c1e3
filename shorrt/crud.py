from datetime import datetime

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from . import models
from .errors import DuplicateToken, StoreUnavailable


def _matches(token: str):
    return or_(models.Link.short == token, models.Link.custom_short == token)


class LinkStore:
    """Queries against the links table. SQLAlchemy errors leave as StoreUnavailable."""

    def __init__(self, db: Session):
        self.db = db

    def insert(self, link: models.Link) -> models.Link:
        self.db.add(link)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise DuplicateToken(link.short) from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StoreUnavailable("Error inserting into database") from exc
        self.db.refresh(link)
        return link

    def find_by_token(self, token: str) -> models.Link | None:
        try:
            return self.db.scalars(select(models.Link).where(_matches(token))).first()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StoreUnavailable("Error querying database") from exc

    def increment_access_count(self, token: str, now: datetime) -> bool:
        """Bump the counter of a live link in one statement.

        Returns False when no unexpired link matches the token.
        """
        stmt = (
            update(models.Link)
            .where(_matches(token))
            .where(or_(models.Link.expiration_date.is_(None), models.Link.expiration_date > now))
            .values(access_count=models.Link.access_count + 1)
            .execution_options(synchronize_session=False)
        )
        try:
            result = self.db.execute(stmt)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StoreUnavailable("Error updating access count") from exc
        return result.rowcount > 0

    def list_all(self) -> list[models.Link]:
        try:
            return list(self.db.scalars(select(models.Link).order_by(models.Link.id)))
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StoreUnavailable("Error querying database") from exc
