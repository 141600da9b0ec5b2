from .dashboard_service import DashboardReportService

__all__ = ['DashboardReportService']
