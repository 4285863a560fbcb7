"""Dashboard statistics schema."""

from pydantic import BaseModel


class DashboardStats(BaseModel):
    """Point-in-time counts shown on the dashboard."""

    total_trends: int = 0
    pending_jobs: int = 0
    completed_jobs: int = 0
    failed_jobs: int = 0
