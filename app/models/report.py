import enum

from sqlalchemy import Column, Float, Integer, String, Text

from app.database import Base


class ReportStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"


class ReportPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class Report(Base):
    __tablename__ = "reports"

    id = Column(Integer, primary_key=True, autoincrement=True)
    image_url = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    location_lat = Column(Float, nullable=True)
    location_lng = Column(Float, nullable=True)
    city = Column(String, nullable=True)
    state = Column(String, nullable=True)
    status = Column(String, nullable=False, default=ReportStatus.PENDING.value)
    priority = Column(String, nullable=False, default=ReportPriority.MEDIUM.value)
    ai_analysis = Column(Text, nullable=True)
    # ISO-8601 UTC with microseconds, so lexical order is chronological
    created_at = Column(String, nullable=False)
