"""Customer and vendor domain services.

Customers and vendors are only kept as owned reference rows that invoices
and purchase orders point at.
"""

from typing import Optional

from ledgerly.database.base import Database
from ledgerly.domain.entities import Customer, Vendor
from ledgerly.domain.errors import NotFoundError, ValidationError, customer_not_found, vendor_not_found
from ledgerly.domain.permissions import require_user


def _clean_name(company_name: str) -> str:
    if not company_name or not company_name.strip():
        raise ValidationError("Company name is required")
    return company_name.strip()


class CustomerService:
    """Service for managing customers."""

    def __init__(self, db: Database):
        self.db = db

    def create_customer(self, user_id: str, company_name: str, email: Optional[str] = None) -> int:
        """Create a customer owned by ``user_id``. Returns customer ID."""
        user_id = require_user(user_id)
        return self.db.create_customer(user_id=user_id, company_name=_clean_name(company_name), email=email)

    def get_customer(self, user_id: str, customer_id: int) -> Customer:
        """Get an owned customer.

        Raises:
            NotFoundError: If the customer does not exist or belongs to someone else
        """
        customer = self.db.get_customer(customer_id)
        if customer is None or customer.user_id != user_id:
            raise NotFoundError(customer_not_found(customer_id))
        return customer

    def list_customers(self, user_id: str) -> list[Customer]:
        return self.db.list_customers(require_user(user_id))


class VendorService:
    """Service for managing vendors."""

    def __init__(self, db: Database):
        self.db = db

    def create_vendor(self, user_id: str, company_name: str, email: Optional[str] = None) -> int:
        """Create a vendor owned by ``user_id``. Returns vendor ID."""
        user_id = require_user(user_id)
        return self.db.create_vendor(user_id=user_id, company_name=_clean_name(company_name), email=email)

    def get_vendor(self, user_id: str, vendor_id: int) -> Vendor:
        """Get an owned vendor.

        Raises:
            NotFoundError: If the vendor does not exist or belongs to someone else
        """
        vendor = self.db.get_vendor(vendor_id)
        if vendor is None or vendor.user_id != user_id:
            raise NotFoundError(vendor_not_found(vendor_id))
        return vendor

    def list_vendors(self, user_id: str) -> list[Vendor]:
        return self.db.list_vendors(require_user(user_id))
