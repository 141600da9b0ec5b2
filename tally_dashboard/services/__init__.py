"""
Tally Dashboard Services Module
===============================

Services layer untuk dashboard application.
Menggunakan dependency injection pattern untuk service management
"""

from .base import BaseService, transactional
from .exceptions import *

# Integration Domain
from .integration import TallyService, TallyTransport, TallyXMLBuilder, SyncLogRecorder

# Ledger & Invoice Domain
from .ledger import LedgerService
from .invoice import InvoiceService

# Auth Domain
from .auth import AuthService, UserService

# Reporting Domain
from .reporting import DashboardReportService

__all__ = [
    # Base Classes
    'BaseService', 'transactional',

    # Integration Domain
    'TallyService', 'TallyTransport', 'TallyXMLBuilder', 'SyncLogRecorder',

    # Ledger & Invoice Domain
    'LedgerService', 'InvoiceService',

    # Auth Domain
    'AuthService', 'UserService',

    # Reporting Domain
    'DashboardReportService',

    'ServiceRegistry', 'create_service_registry',
]


class ServiceRegistry:
    """
    Service Registry untuk dependency injection
    Mengelola lifecycle dan dependencies antar services
    """

    def __init__(self, db_session, config: dict, current_user=None,
                 tally_service: TallyService = None, session_factory=None):
        self.db_session = db_session
        self.config = config
        self.current_user = current_user
        self._services = {}

        if session_factory is None:
            from ..database import AsyncSessionLocal
            session_factory = AsyncSessionLocal
        self.session_factory = session_factory

        # Initialize core services first
        self._init_core_services(tally_service)

        # Initialize domain services
        self._init_domain_services()

    def _init_core_services(self, tally_service: TallyService = None):
        """Initialize core services yang diperlukan services lain"""

        # Tally Service (dipakai ledger & invoice)
        self._services['tally'] = tally_service or TallyService.from_config(
            self.config, self.session_factory
        )

        self._services['auth'] = AuthService(
            db_session=self.db_session,
            secret_key=self.config.get('secret_key', ''),
            algorithm=self.config.get('algorithm', 'HS256'),
            token_expiry_minutes=self.config.get('access_token_expire_minutes', 60 * 24 * 7),
            current_user=self.current_user
        )

    def _init_domain_services(self):
        """Initialize domain services dengan dependencies"""

        self._services['ledger'] = LedgerService(
            db_session=self.db_session,
            tally_service=self._services['tally'],
            current_user=self.current_user
        )

        self._services['invoice'] = InvoiceService(
            db_session=self.db_session,
            tally_service=self._services['tally'],
            current_user=self.current_user
        )

        self._services['user'] = UserService(
            db_session=self.db_session,
            current_user=self.current_user
        )

        self._services['dashboard'] = DashboardReportService(
            db_session=self.db_session,
            current_user=self.current_user
        )

    def get_service(self, service_name: str):
        """Get service by name"""
        if service_name not in self._services:
            raise ValueError(f"Service '{service_name}' not found")
        return self._services[service_name]

    def get_all_services(self) -> dict:
        """Get all registered services"""
        return self._services.copy()

    # Convenience methods untuk frequently used services
    @property
    def tally_service(self) -> TallyService:
        """Get TallyService"""
        return self.get_service('tally')

    @property
    def ledger_service(self) -> LedgerService:
        """Get LedgerService"""
        return self.get_service('ledger')

    @property
    def invoice_service(self) -> InvoiceService:
        """Get InvoiceService"""
        return self.get_service('invoice')

    @property
    def auth_service(self) -> AuthService:
        """Get AuthService"""
        return self.get_service('auth')

    @property
    def user_service(self) -> UserService:
        """Get UserService"""
        return self.get_service('user')

    @property
    def dashboard_service(self) -> DashboardReportService:
        """Get DashboardReportService"""
        return self.get_service('dashboard')


# Factory function untuk easy service registry creation
def create_service_registry(db_session, config: dict, current_user=None, **kwargs) -> ServiceRegistry:
    """Factory function untuk membuat ServiceRegistry"""
    return ServiceRegistry(db_session, config, current_user, **kwargs)
