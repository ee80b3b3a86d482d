from sqlalchemy.orm import Session
from typing import Iterable, List, Tuple
import logging
import uuid

from app.core.exceptions import NotFoundError
from app.models.subscription import PlanEnum
from app.models.waitlist_entry import WaitlistEntry
from app.schemas.waitlist import WaitlistJoin
from app.services.plan_limits import PlanLimits, assert_within_limit
from app.utils.audit import audit

logger = logging.getLogger(__name__)


class WaitlistService:
    def __init__(self, db: Session):
        self.db = db

    def find_pending(self, shop_domain: str, variant_id: str, email: str):
        return self.db.query(WaitlistEntry).filter(
            WaitlistEntry.shop_domain == shop_domain,
            WaitlistEntry.variant_id == variant_id,
            WaitlistEntry.email == email,
            WaitlistEntry.notified == False,
        ).first()

    def count_for_shop(self, shop_domain: str) -> int:
        return self.db.query(WaitlistEntry).filter(
            WaitlistEntry.shop_domain == shop_domain
        ).count()

    def assert_within_limit(self, plan: PlanEnum, limits: PlanLimits, entry: WaitlistJoin) -> None:
        """Only a signup that would insert a new row counts against the quota."""
        if limits.max_waitlist_emails is None:
            return
        if self.find_pending(entry.shop_domain, entry.variant_id, entry.email):
            return
        current = self.count_for_shop(entry.shop_domain)
        assert_within_limit(plan, "waitlist_emails", limits.max_waitlist_emails, current)

    def add_to_waitlist(self, entry: WaitlistJoin) -> Tuple[WaitlistEntry, bool]:
        """Join a variant's waitlist; returns (entry, created).

        An unnotified signup for the same shop/variant/email is returned as-is.
        """
        existing = self.find_pending(entry.shop_domain, entry.variant_id, entry.email)
        if existing:
            return existing, False

        row = WaitlistEntry(
            shop_domain=entry.shop_domain,
            product_id=entry.product_id,
            variant_id=entry.variant_id,
            email=entry.email,
            notified=False,
        )
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)

        audit("waitlist.joined", shop=entry.shop_domain, email=entry.email, variant_id=entry.variant_id)
        return row, True

    def get_waitlist_entries(self, shop_domain: str) -> List[WaitlistEntry]:
        return self.db.query(WaitlistEntry).filter(
            WaitlistEntry.shop_domain == shop_domain
        ).order_by(WaitlistEntry.created_at.desc(), WaitlistEntry.id).all()

    def get_waitlist_by_variant(self, shop_domain: str, variant_id: str) -> List[WaitlistEntry]:
        return self.db.query(WaitlistEntry).filter(
            WaitlistEntry.shop_domain == shop_domain,
            WaitlistEntry.variant_id == variant_id,
            WaitlistEntry.notified == False,
        ).order_by(WaitlistEntry.created_at).all()

    def mark_notified(self, ids: Iterable[uuid.UUID]) -> int:
        ids = list(ids)
        if not ids:
            return 0
        # Only rows still pending flip, so concurrent notifiers don't double count
        count = self.db.query(WaitlistEntry).filter(
            WaitlistEntry.id.in_(ids),
            WaitlistEntry.notified == False,
        ).update({WaitlistEntry.notified: True}, synchronize_session=False)
        self.db.commit()
        self.db.expire_all()
        return count

    def delete_entry(self, shop_domain: str, entry_id: uuid.UUID) -> None:
        entry = self.db.query(WaitlistEntry).filter(
            WaitlistEntry.id == entry_id,
            WaitlistEntry.shop_domain == shop_domain,
        ).first()
        if not entry:
            raise NotFoundError("Waitlist entry not found")
        email = entry.email
        self.db.delete(entry)
        self.db.commit()
        audit("waitlist.deleted", shop=shop_domain, email=email, entry_id=str(entry_id))
