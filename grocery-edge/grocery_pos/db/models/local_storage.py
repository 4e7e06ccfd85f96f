# grocery_pos/db/models/local_storage.py
from sqlalchemy import Column, DateTime, String, Text

from grocery_pos.core.time_utils import utcnow
from grocery_pos.db.base import Base


class LocalStorageEntry(Base):
    __tablename__ = "local_storage"

    """Key/value slot for small documents the edge node keeps locally.

    The sync queue stores its whole pending list under one key and the time
    of the last successful sync under another; both are rewritten wholesale.
    """

    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)

    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
