#!/usr/bin/env python3
"""
Create database tables for local development (use Alembic for real deployments).

    python init_db.py                         # tables only
    python init_db.py demo.myshopify.com PRO  # tables + a subscription row
"""
import sys
import os

# Add the project root to Python path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from app.core.database import Base, engine, SessionLocal
import app.models  # noqa: F401  registers every model on Base
from app.services.billing_service import BillingService
from app.services.plan_limits import parse_plan


def init_database(shop_domain: str = None, plan: str = None):
    print("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    print("Tables created successfully!")

    if not shop_domain:
        return

    db = SessionLocal()
    try:
        subscription = BillingService(db).set_subscription(shop_domain, parse_plan(plan or "FREE"))
        print(f"Subscription for {shop_domain}: {subscription.plan.value}/{subscription.status.value}")
    finally:
        db.close()


if __name__ == "__main__":
    init_database(*sys.argv[1:3])
