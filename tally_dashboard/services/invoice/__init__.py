from .invoice_service import InvoiceService

__all__ = ['InvoiceService']
