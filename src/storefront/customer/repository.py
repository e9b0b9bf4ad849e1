"""Repository for the Customer aggregate."""

from storefront.customer.customer import Customer
from storefront.domain import storefront


@storefront.repository(part_of=Customer)
class CustomerRepository:
    def find(self, customer_id) -> Customer | None:
        results = self._dao.query.filter(id=str(customer_id)).all()
        return results.items[0] if results.items else None

    def find_by_email(self, email) -> Customer | None:
        results = self._dao.query.filter(email=email.strip().lower()).all()
        return results.items[0] if results.items else None
