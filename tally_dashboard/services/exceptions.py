"""
Custom Exceptions untuk Dashboard Services
==========================================

Definisi semua custom exceptions yang digunakan dalam business logic
dan integrasi Tally.
"""

class DashboardException(Exception):
    """Base exception untuk semua dashboard errors"""
    def __init__(self, message, error_code=None, details=None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self):
        return {
            'success': False,
            'message': self.message,
            'error_code': self.error_code,
            'details': self.details
        }

class ValidationError(DashboardException):
    """Error untuk validation failures"""
    def __init__(self, message, field=None, details=None):
        super().__init__(message, 'VALIDATION_ERROR', details)
        self.field = field

class AuthenticationError(DashboardException):
    """Error untuk authentication failures"""
    def __init__(self, message="Authentication failed", details=None):
        super().__init__(message, 'AUTHENTICATION_ERROR', details)

class AuthorizationError(DashboardException):
    """Error untuk authorization failures"""
    def __init__(self, message="Access denied", required_role=None, details=None):
        super().__init__(message, 'AUTHORIZATION_ERROR', details)
        self.required_role = required_role

class NotFoundError(DashboardException):
    """Error ketika resource tidak ditemukan"""
    def __init__(self, resource_type, resource_id, details=None):
        message = f"{resource_type} with ID {resource_id} not found"
        super().__init__(message, 'NOT_FOUND', details)
        self.resource_type = resource_type
        self.resource_id = resource_id

class ConflictError(DashboardException):
    """Error untuk resource conflicts (duplicate name, voucher number)"""
    def __init__(self, message, resource_type=None, details=None):
        super().__init__(message, 'CONFLICT_ERROR', details)
        self.resource_type = resource_type

# ==================== TALLY INTEGRATION ====================

class TallyIntegrationError(DashboardException):
    """Error untuk Tally integration failures"""
    def __init__(self, message, tally_response=None, details=None, error_code='TALLY_INTEGRATION_ERROR'):
        super().__init__(message, error_code, details)
        self.tally_response = tally_response

class TallyConnectionRefusedError(TallyIntegrationError):
    """Tally listener tidak menerima koneksi (service mati, port salah, API off)"""
    def __init__(self, tally_host, details=None):
        message = (
            f"Cannot connect to Tally at {tally_host}. Make sure: "
            "1. Tally is running, "
            "2. the Tally HTTP/ODBC server is enabled (F1 > Settings > Connectivity), "
            f"3. Tally is listening on the configured port ({tally_host})"
        )
        super().__init__(message, details=details, error_code='TALLY_CONNECTION_REFUSED')
        self.tally_host = tally_host

class TallyHTTPError(TallyIntegrationError):
    """Tally merespon dengan error status (non-2xx)"""
    def __init__(self, status_code, body=None, details=None):
        super().__init__(
            f"Tally returned {status_code}: {body or ''}".strip(),
            tally_response=body,
            details=details,
            error_code='TALLY_HTTP_ERROR'
        )
        self.status_code = status_code

class TallyNoResponseError(TallyIntegrationError):
    """Request terkirim tapi tidak ada response (timeout, koneksi putus)"""
    def __init__(self, message="No response received from Tally", details=None):
        super().__init__(message, details=details, error_code='TALLY_NO_RESPONSE')

class TallyTransportError(TallyIntegrationError):
    """Kegagalan transport lainnya"""
    def __init__(self, message, details=None):
        super().__init__(message, details=details, error_code='TALLY_TRANSPORT_ERROR')
