from sqlalchemy import Column, Integer, String, ForeignKey, TIMESTAMP, text
from .base import Base

NAME_MAX_LENGTH = 100


class Folder(Base):
    __tablename__ = "folder"

    id         = Column(Integer, primary_key=True, autoincrement=True)
    name       = Column(String(NAME_MAX_LENGTH), nullable=False)
    # children are derived from parent_id on demand, no backref
    parent_id  = Column(Integer, ForeignKey("folder.id"), nullable=True, index=True)
    created_at = Column(TIMESTAMP, nullable=False, server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(TIMESTAMP, nullable=False,
                        server_default=text("CURRENT_TIMESTAMP"),
                        onupdate=text("CURRENT_TIMESTAMP"))

    def __repr__(self):
        return f"<Folder id={self.id} name={self.name!r} parent_id={self.parent_id}>"
