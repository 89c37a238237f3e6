from app.models.report import Report, ReportStatus, ReportPriority
from app.models.user import User
from app.models.adoption import Adoption

__all__ = ["Report", "ReportStatus", "ReportPriority", "User", "Adoption"]
