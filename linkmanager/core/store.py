import logging
from datetime import datetime, timedelta
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy import desc, func, not_, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..models import Link, utcnow
from .errors import ConflictError, NotFoundError, StoreError, ValidationError

logger = logging.getLogger(__name__)

# Category filter value meaning "no restriction"
ALL_CATEGORIES = "all"

MUTABLE_FIELDS = frozenset({
    "title", "url", "description", "category", "tags",
    "domain", "favicon", "is_starred",
})


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term matches literally"""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class LinkStore:
    """
    Persistence operations over the links table.

    One store wraps one session; the API layer builds a store per request.
    """

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _reading(self) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as e:
            logger.error("Database read failed: %s", e)
            raise StoreError("Database error") from e

    @contextmanager
    def _writing(self) -> Iterator[None]:
        try:
            yield
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if "unique" in str(e.orig).lower():
                raise ConflictError("Link already exists") from e
            logger.error("Integrity error: %s", e.orig)
            raise StoreError("Database error") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Database write failed: %s", e)
            raise StoreError("Database error") from e

    @staticmethod
    def _newest_first(query: Query) -> List[Link]:
        return query.order_by(desc(Link.date_added), desc(Link.id)).all()

    def _next_modified(self, link_id: int) -> Optional[datetime]:
        """
        Timestamp for the next mutation of a link.

        Never earlier than one microsecond past the stored date_modified, so the
        value strictly increases even if the clock stalls or steps back.
        Returns None if the link does not exist.
        """
        previous = self.db.query(Link.date_modified).filter(Link.id == link_id).scalar()
        if previous is None:
            return None
        return max(utcnow(), previous + timedelta(microseconds=1))

    def _stamped_update(self, link_id: int, values: Dict[Any, Any]) -> int:
        stamp = self._next_modified(link_id)
        if stamp is None:
            return 0
        values[Link.date_modified] = stamp
        return self.db.query(Link).filter(
            Link.id == link_id
        ).update(values, synchronize_session=False)

    def list_all(self) -> List[Link]:
        """All links, newest first"""
        with self._reading():
            return self._newest_first(self.db.query(Link))

    def search(
        self,
        term: Optional[str] = None,
        category: Optional[str] = None,
        starred_only: bool = False
    ) -> List[Link]:
        """
        Filter links, newest first.

        Args:
            term: Case-insensitive substring of title, description, tags or domain
            category: Exact category; None or "all" means any
            starred_only: Restrict to starred links

        Returns:
            Links matching every supplied filter
        """
        query = self.db.query(Link)

        if term:
            # ilike lowers both sides in the database engine
            pattern = f"%{escape_like(term)}%"
            query = query.filter(or_(
                Link.title.ilike(pattern, escape="\\"),
                Link.description.ilike(pattern, escape="\\"),
                Link.tags.ilike(pattern, escape="\\"),
                Link.domain.ilike(pattern, escape="\\"),
            ))

        if category and category != ALL_CATEGORIES:
            query = query.filter(Link.category == category)

        if starred_only:
            query = query.filter(Link.is_starred == True)  # noqa: E712

        with self._reading():
            return self._newest_first(query)

    def get(self, link_id: int) -> Link:
        with self._reading():
            link = self.db.query(Link).filter(Link.id == link_id).first()

        if not link:
            raise NotFoundError("Link not found")
        return link

    def count(self) -> int:
        with self._reading():
            return self.db.query(func.count(Link.id)).scalar()

    def add(
        self,
        title: str,
        url: str,
        description: Optional[str] = None,
        category: Optional[str] = None,
        tags: str = "",
        domain: Optional[str] = None,
        favicon: Optional[str] = None,
        is_starred: bool = False
    ) -> int:
        """
        Insert a link.

        Returns:
            The newly assigned id

        Raises:
            ConflictError: If the URL is already saved
        """
        now = utcnow()
        link = Link(
            title=title,
            url=url,
            description=description,
            category=category,
            tags=tags,
            domain=domain,
            favicon=favicon,
            is_starred=is_starred,
            date_added=now,
            date_modified=now
        )

        with self._writing():
            self.db.add(link)
            self.db.flush()
            link_id = link.id

        logger.info("Added link %s (%s)", link_id, url)
        return link_id

    def update(self, link_id: int, fields: Dict[str, Any]) -> None:
        """
        Apply exactly the given fields and stamp date_modified.

        Raises:
            ValidationError: If fields is empty or names an immutable column
            NotFoundError: If no link has this id
            ConflictError: If a new URL clashes with another link
        """
        if not fields:
            raise ValidationError("No fields to update")

        unknown = set(fields) - MUTABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update field(s): {', '.join(sorted(unknown))}")

        values = {getattr(Link, name): value for name, value in fields.items()}

        with self._writing():
            updated = self._stamped_update(link_id, values)

        if not updated:
            raise NotFoundError("Link not found")
        logger.info("Updated link %s: %s", link_id, ", ".join(sorted(fields)))

    def delete(self, link_id: int) -> None:
        with self._writing():
            deleted = self.db.query(Link).filter(
                Link.id == link_id
            ).delete(synchronize_session=False)

        if not deleted:
            raise NotFoundError("Link not found")
        logger.info("Deleted link %s", link_id)

    def toggle_star(self, link_id: int) -> None:
        """Flip is_starred in a single UPDATE statement"""
        with self._writing():
            updated = self._stamped_update(
                link_id, {Link.is_starred: not_(Link.is_starred)}
            )

        if not updated:
            raise NotFoundError("Link not found")
        logger.debug("Toggled star on link %s", link_id)

    def list_categories(self) -> List[str]:
        """Distinct non-null categories, alphabetically"""
        with self._reading():
            rows = self.db.query(Link.category).filter(
                Link.category.isnot(None)
            ).distinct().order_by(Link.category).all()

        return [row.category for row in rows]
