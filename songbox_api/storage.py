import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from sqlalchemy import DateTime, Integer, Text, create_engine, select
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column
from sqlalchemy.pool import StaticPool

from .errors import StorageError, ValidationError
from .models import Song
from .utils import is_absolute_url

logger = logging.getLogger(__name__)

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

class Base(DeclarativeBase):
    pass

class SongRow(Base):
    __tablename__ = "songs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    audio_url: Mapped[str] = mapped_column(Text, nullable=False)
    # microsecond precision so back-to-back inserts still order newest first
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)

def make_engine(url: str) -> Engine:
    """Build an engine for `url`; SQLite files get their parent folder created."""
    u = make_url(url)
    if u.get_backend_name() != "sqlite":
        return create_engine(url)
    kwargs = {"connect_args": {"check_same_thread": False}}
    if u.database in (None, "", ":memory:"):
        # one shared connection, otherwise every session sees an empty database
        kwargs["poolclass"] = StaticPool
    else:
        Path(u.database).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(url, **kwargs)

class SongStore:
    """The `songs` table. Reads back pydantic `Song` objects, never ORM rows."""

    def __init__(self, engine: Engine):
        self.engine = engine

    @classmethod
    def from_url(cls, url: str) -> "SongStore":
        return cls(make_engine(url))

    def create_schema(self):
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            raise StorageError(f"Could not create songs table: {e}") from e

    def list_songs(self) -> List[Song]:
        stmt = select(SongRow).order_by(SongRow.created_at.desc(), SongRow.id.asc())
        try:
            with Session(self.engine) as session:
                rows = session.scalars(stmt).all()
                return [Song.model_validate(r) for r in rows]
        except SQLAlchemyError as e:
            logger.error("list_songs failed: %s", e)
            raise StorageError(f"Failed to fetch songs: {e}") from e

    def get_song(self, song_id: int) -> Optional[Song]:
        try:
            with Session(self.engine) as session:
                row = session.get(SongRow, song_id)
                return Song.model_validate(row) if row is not None else None
        except OverflowError:
            # wider than the INTEGER column, so no row can match
            return None
        except SQLAlchemyError as e:
            logger.error("get_song(%s) failed: %s", song_id, e)
            raise StorageError(f"Failed to fetch song {song_id}: {e}") from e

    def add_song(self, name: str, audio_url: str, created_at: Optional[datetime] = None) -> Song:
        """Insert one song. Only seeding and tests write to the table."""
        if not name or not name.strip():
            raise ValidationError("Song name must not be empty")
        if not is_absolute_url(audio_url):
            raise ValidationError(f"audio_url must be an absolute URL, got {audio_url!r}")
        if created_at is None:
            created_at = utc_now()
        elif created_at.tzinfo is not None:
            # stored naive by SQLite; keep every row in UTC so the text sorts
            created_at = created_at.astimezone(timezone.utc)
        row = SongRow(name=name, audio_url=audio_url, created_at=created_at)
        try:
            with Session(self.engine) as session:
                session.add(row)
                session.commit()
                session.refresh(row)
                return Song.model_validate(row)
        except SQLAlchemyError as e:
            logger.error("add_song(%r) failed: %s", name, e)
            raise StorageError(f"Failed to insert song {name!r}: {e}") from e
