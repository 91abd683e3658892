from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.orm import declarative_base
from sqlalchemy.types import TypeDecorator
from .timeutils import ensure_utc, utcnow

Base = declarative_base()


class UTCDateTime(TypeDecorator):
    """Timestamp stored as UTC and always read back timezone-aware.

    SQLite drops tzinfo on round trip, so the value is normalized on bind
    and re-tagged as UTC on load.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        value = ensure_utc(value)
        if dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return ensure_utc(value)


class TaskItem(Base):
    __tablename__ = "task_items"
    # AUTOINCREMENT keeps SQLite from reusing the id of a deleted last row
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String, nullable=True)  # free-form: To Do, In Progress, Done, ...
    assigned_user = Column(String, nullable=True)
    created_date = Column(UTCDateTime, nullable=False, default=utcnow, index=True)

    def __repr__(self):
        return f"<TaskItem(id={self.id}, title='{self.title}', status='{self.status}')>"
