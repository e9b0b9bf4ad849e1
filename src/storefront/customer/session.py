"""CustomerSession aggregate: the server side of the ``session`` cookie.

Sign-in itself is out of scope. Something else creates sessions; this
module only resolves a cookie value to a live session and its customer.
"""

import secrets
from datetime import UTC, datetime, timedelta

from protean.fields import Boolean, DateTime, Identifier, String

from storefront import settings
from storefront.customer.events import SessionEnded, SessionStarted
from storefront.domain import storefront


@storefront.aggregate
class CustomerSession:
    session_id = String(required=True, max_length=128, unique=True)
    customer_id = Identifier(required=True)
    is_active = Boolean(default=True)
    expires_at = DateTime(required=True)
    last_activity = DateTime()
    user_agent = String(max_length=500)
    ip_address = String(max_length=64)

    @classmethod
    def start(cls, customer_id, user_agent=None, ip_address=None, ttl_days=None):
        now = datetime.now(UTC)
        session = cls(
            session_id=secrets.token_hex(32),
            customer_id=customer_id,
            is_active=True,
            expires_at=now + timedelta(days=ttl_days or settings.SESSION_TTL_DAYS),
            last_activity=now,
            user_agent=user_agent,
            ip_address=ip_address,
        )
        session.raise_(
            SessionStarted(
                session_id=session.session_id,
                customer_id=str(customer_id),
                expires_at=session.expires_at,
            )
        )
        return session

    def is_valid(self, now=None):
        now = now or datetime.now(UTC)
        return bool(self.is_active) and self.expires_at > now

    def end(self):
        self.is_active = False
        self.raise_(SessionEnded(session_id=self.session_id, customer_id=str(self.customer_id)))


@storefront.repository(part_of=CustomerSession)
class CustomerSessionRepository:
    def find_valid(self, session_id):
        """Return the active, unexpired session for a cookie value, or None."""
        if not session_id:
            return None

        results = self._dao.query.filter(session_id=session_id).all()
        valid = [s for s in results.items if s.is_valid()]
        return valid[0] if valid else None
