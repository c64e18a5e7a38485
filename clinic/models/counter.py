from sqlalchemy import Column, Integer, String

from ..core.database import Base

class Counter(Base):
    """Named sequence backing record numbers; one row per entity kind."""
    __tablename__ = "counters"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), unique=True, nullable=False)
    value = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<Counter(name='{self.name}', value={self.value})>"
