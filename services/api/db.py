from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, Integer, String, Text, create_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool

from vetmatch.config import DATABASE_DIR, DATABASE_URL


class Base(DeclarativeBase):
    pass


class ResourceRow(Base):
    __tablename__ = "resources"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    categories_json: Mapped[str] = mapped_column(Text, nullable=False, default="[]")  # JSON list of labels
    tags_json: Mapped[str] = mapped_column(Text, nullable=False, default="[]")  # JSON list of tags
    organization: Mapped[str] = mapped_column(Text, nullable=False, default="")
    org_type: Mapped[str] = mapped_column(String(32), nullable=False, default="unknown")
    location: Mapped[str | None] = mapped_column(Text, nullable=True)  # region code, "national" or null
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    review_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    contact_json: Mapped[str | None] = mapped_column(Text, nullable=True)  # JSON object: phone/email/url
    last_updated: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)


# Engine and session factory
_engine = None
_SessionLocal = None


def create_db_engine(url: str):
    """Engine for url. In-memory SQLite shares one connection so every session sees the same tables."""
    if url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(url, connect_args={"check_same_thread": False}, poolclass=StaticPool)
    return create_engine(url, connect_args={"check_same_thread": False} if "sqlite" in url else {})


def get_engine():
    global _engine
    if _engine is None:
        if DATABASE_URL.startswith("sqlite:///") and ":memory:" not in DATABASE_URL:
            DATABASE_DIR.mkdir(parents=True, exist_ok=True)
        _engine = create_db_engine(DATABASE_URL)
    return _engine


def get_session_factory():
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
    return _SessionLocal


def init_db(engine=None) -> None:
    """Create all tables. No migrations."""
    Base.metadata.create_all(bind=engine or get_engine())
