# Overview: Maps service-layer exceptions to JSON error responses.

from flask import jsonify

from .data_store import DataStoreError
from .services.backup_service import BackupError
from .services.cart_service import CartError
from .services.payment_service import PaymentError
from .services.sales_service import SaleError
from .services.supplier_service import SupplierLedgerError
from .services.user_service import PasswordValidationError, UserError
from .validation import ConflictError, NotFoundError, ValidationError


# Most specific first: ConflictError and ValidationError share a base
HTTP_STATUS = (
    (NotFoundError, 404),
    (ConflictError, 409),
    (ValidationError, 400),
    (CartError, 400),
    (SaleError, 400),
    (PaymentError, 400),
    (SupplierLedgerError, 400),
    (BackupError, 400),
    (PasswordValidationError, 400),
    (UserError, 400),
    (DataStoreError, 502),
)

DOMAIN_ERRORS = tuple(cls for cls, _ in HTTP_STATUS)


def error_response(exc: Exception):
    for cls, status in HTTP_STATUS:
        if isinstance(exc, cls):
            if status == 502:
                return jsonify({"error": "Data store unavailable", "detail": str(exc)}), status
            return jsonify({"error": str(exc)}), status
    raise exc
