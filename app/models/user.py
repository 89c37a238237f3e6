from sqlalchemy import Column, Integer, String

from app.database import Base


class User(Base):
    """Reserved: created with the schema, not used by any flow yet."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String, nullable=True, unique=True)
    password = Column(String, nullable=True)
    role = Column(String, nullable=False, default="user")
    name = Column(String, nullable=True)
