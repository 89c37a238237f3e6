from sqlalchemy import Column, Integer, String, Text, ForeignKey

from app.database import Base


class Adoption(Base):
    """Reserved: created with the schema, not used by any flow yet."""

    __tablename__ = "adoptions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    report_id = Column(Integer, ForeignKey("reports.id"), nullable=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    message = Column(Text, nullable=True)
    status = Column(String, nullable=False, default="pending")
    created_at = Column(String, nullable=True)
