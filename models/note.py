from sqlalchemy import Column, Integer, String, Text, SmallInteger, ForeignKey, TIMESTAMP, text
from .base import Base

TITLE_MAX_LENGTH = 255


class Note(Base):
    __tablename__ = "note"

    id         = Column(Integer, primary_key=True, autoincrement=True)
    folder_id  = Column(Integer, ForeignKey("folder.id"), nullable=False, index=True)
    title      = Column(String(TITLE_MAX_LENGTH), nullable=False)
    body       = Column(Text, nullable=False, default="")
    flag       = Column(SmallInteger, nullable=False, default=0, server_default=text("0"))
    created_at = Column(TIMESTAMP, nullable=False, server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(TIMESTAMP, nullable=False,
                        server_default=text("CURRENT_TIMESTAMP"),
                        onupdate=text("CURRENT_TIMESTAMP"))

    def __repr__(self):
        return f"<Note id={self.id} folder_id={self.folder_id} title={self.title!r}>"
