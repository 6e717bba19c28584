"""
SQLAlchemy-backed shop repository, used when DATABASE_URL is set.
Implements the same interface as storefront.database.memory.
"""

from __future__ import annotations

import re
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy import create_engine, desc, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from storefront.database.models import Base, Donation, Order, Product
from storefront.database.records import (
    DonationRecord,
    DuplicateSlugError,
    OrderRecord,
    ProductRecord,
    RepositoryError,
)

_PRODUCT_COLUMNS = (
    "slug", "name", "category", "price", "currency", "tags", "impact_statement",
    "description", "images", "availability", "inventory", "variations",
)
_ORDER_COLUMNS = (
    "customer_email", "customer_name", "items", "total_amount", "currency",
    "stripe_payment_intent_id", "status", "shipping_address",
)
_DONATION_COLUMNS = (
    "donor_email", "donor_name", "amount", "currency", "frequency", "message",
    "anonymous", "stripe_payment_intent_id", "status",
)


def _normalize_connection_string(s: str) -> str:
    """Strip common mistakes: 'psql \'...\'', extra quotes, whitespace."""
    s = s.strip()
    if re.match(r"^psql\s+", s, re.IGNORECASE):
        s = re.sub(r"^psql\s+", "", s, flags=re.IGNORECASE).strip()
    if len(s) >= 2 and s[0] == s[-1] and s[0] in ("'", '"'):
        s = s[1:-1].strip()
    # SQLAlchemy no longer accepts the bare "postgres://" scheme
    if s.startswith("postgres://"):
        s = "postgresql+psycopg://" + s[len("postgres://"):]
    elif s.startswith("postgresql://"):
        s = "postgresql+psycopg://" + s[len("postgresql://"):]
    return s


def _product_record(p: Product) -> ProductRecord:
    return ProductRecord(
        id=p.id,
        slug=p.slug,
        name=p.name,
        category=p.category,
        price=p.price,
        description=p.description,
        currency=p.currency,
        tags=list(p.tags or []),
        impact_statement=p.impact_statement,
        images=list(p.images or []),
        availability=p.availability,
        inventory=p.inventory,
        variations=list(p.variations or []),
        created_at=p.created_at,
        updated_at=p.updated_at,
    )


def _order_record(o: Order) -> OrderRecord:
    return OrderRecord(
        id=o.id,
        customer_email=o.customer_email,
        customer_name=o.customer_name,
        items=list(o.items or []),
        total_amount=o.total_amount,
        currency=o.currency,
        stripe_payment_intent_id=o.stripe_payment_intent_id,
        status=o.status,
        shipping_address=o.shipping_address,
        created_at=o.created_at,
        updated_at=o.updated_at,
    )


def _donation_record(d: Donation) -> DonationRecord:
    return DonationRecord(
        id=d.id,
        donor_email=d.donor_email,
        donor_name=d.donor_name,
        amount=d.amount,
        currency=d.currency,
        frequency=d.frequency,
        message=d.message,
        anonymous=bool(d.anonymous),
        stripe_payment_intent_id=d.stripe_payment_intent_id,
        status=d.status,
        created_at=d.created_at,
    )


def _pick(data: Dict[str, Any], columns) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if k in columns}


class SqlShopRepository:
    """
    Shop data access using SQLAlchemy. Any SQLAlchemy URL works; Postgres is
    the production target, SQLite is handy for local runs.
    """

    def __init__(self, connection_string: str) -> None:
        connection_string = _normalize_connection_string(connection_string)
        engine_kwargs: Dict[str, Any] = {"pool_pre_ping": True}
        if not connection_string.startswith("sqlite"):
            engine_kwargs.update(pool_size=5, max_overflow=10)
        self.engine = create_engine(connection_string, **engine_kwargs)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine, expire_on_commit=False)

    def create_tables(self) -> None:
        Base.metadata.create_all(bind=self.engine)

    @contextmanager
    def _session(self) -> Iterator[Session]:
        s = self.SessionLocal()
        try:
            yield s
            s.commit()
        except IntegrityError:
            s.rollback()
            raise
        except SQLAlchemyError as e:
            s.rollback()
            raise RepositoryError(str(e)) from e
        except Exception:
            s.rollback()
            raise
        finally:
            s.close()

    def ping(self) -> bool:
        with self._session() as s:
            s.execute(text("SELECT 1"))
        return True

    # ------------------------------------------------------------------ #
    # Products
    # ------------------------------------------------------------------ #
    def list_products(self) -> List[ProductRecord]:
        with self._session() as s:
            stmt = select(Product).order_by(desc(Product.created_at), desc(Product.id))
            return [_product_record(p) for p in s.execute(stmt).scalars()]

    def get_product_by_id(self, product_id: int) -> Optional[ProductRecord]:
        with self._session() as s:
            p = s.get(Product, product_id)
            return _product_record(p) if p else None

    def get_product_by_slug(self, slug: str) -> Optional[ProductRecord]:
        with self._session() as s:
            p = s.execute(select(Product).where(Product.slug == slug)).scalar_one_or_none()
            return _product_record(p) if p else None

    def create_product(self, data: Dict[str, Any]) -> ProductRecord:
        try:
            with self._session() as s:
                p = Product(**_pick(data, _PRODUCT_COLUMNS))
                s.add(p)
                s.flush()
                s.refresh(p)
                return _product_record(p)
        except IntegrityError as e:
            raise DuplicateSlugError(data.get("slug", "")) from e

    def update_product(self, product_id: int, data: Dict[str, Any]) -> Optional[ProductRecord]:
        try:
            with self._session() as s:
                p = s.get(Product, product_id)
                if p is None:
                    return None
                for key, value in _pick(data, _PRODUCT_COLUMNS).items():
                    setattr(p, key, value)
                p.updated_at = datetime.utcnow()
                s.flush()
                s.refresh(p)
                return _product_record(p)
        except IntegrityError as e:
            raise DuplicateSlugError(data.get("slug", "")) from e

    def delete_product(self, product_id: int) -> bool:
        with self._session() as s:
            p = s.get(Product, product_id)
            if p is None:
                return False
            s.delete(p)
            return True

    # ------------------------------------------------------------------ #
    # Orders
    # ------------------------------------------------------------------ #
    def create_order(self, data: Dict[str, Any]) -> OrderRecord:
        with self._session() as s:
            o = Order(**_pick(data, _ORDER_COLUMNS))
            s.add(o)
            s.flush()
            s.refresh(o)
            return _order_record(o)

    def list_orders(self) -> List[OrderRecord]:
        with self._session() as s:
            stmt = select(Order).order_by(desc(Order.created_at), desc(Order.id))
            return [_order_record(o) for o in s.execute(stmt).scalars()]

    def get_order_by_id(self, order_id: int) -> Optional[OrderRecord]:
        with self._session() as s:
            o = s.get(Order, order_id)
            return _order_record(o) if o else None

    def find_order_by_payment_intent(self, payment_intent_id: str) -> Optional[OrderRecord]:
        with self._session() as s:
            stmt = select(Order).where(Order.stripe_payment_intent_id == payment_intent_id).limit(1)
            o = s.execute(stmt).scalar_one_or_none()
            return _order_record(o) if o else None

    def update_order_status(
        self, order_id: int, status: str, payment_intent_id: Optional[str] = None
    ) -> Optional[OrderRecord]:
        with self._session() as s:
            o = s.get(Order, order_id)
            if o is None:
                return None
            o.status = status
            o.updated_at = datetime.utcnow()
            if payment_intent_id:
                o.stripe_payment_intent_id = payment_intent_id
            s.flush()
            return _order_record(o)

    def update_order_customer_info(
        self,
        order_id: int,
        customer_email: Optional[str],
        customer_name: Optional[str],
        shipping_address: Optional[Dict[str, Any]],
    ) -> Optional[OrderRecord]:
        with self._session() as s:
            o = s.get(Order, order_id)
            if o is None:
                return None
            o.customer_email = customer_email
            o.customer_name = customer_name
            o.shipping_address = shipping_address
            o.updated_at = datetime.utcnow()
            s.flush()
            return _order_record(o)

    # ------------------------------------------------------------------ #
    # Donations
    # ------------------------------------------------------------------ #
    def create_donation(self, data: Dict[str, Any]) -> DonationRecord:
        with self._session() as s:
            d = Donation(**_pick(data, _DONATION_COLUMNS))
            s.add(d)
            s.flush()
            s.refresh(d)
            return _donation_record(d)

    def list_donations(self) -> List[DonationRecord]:
        with self._session() as s:
            stmt = select(Donation).order_by(desc(Donation.created_at), desc(Donation.id))
            return [_donation_record(d) for d in s.execute(stmt).scalars()]

    def get_donation_by_id(self, donation_id: int) -> Optional[DonationRecord]:
        with self._session() as s:
            d = s.get(Donation, donation_id)
            return _donation_record(d) if d else None

    def find_donation_by_payment_intent(self, payment_intent_id: str) -> Optional[DonationRecord]:
        with self._session() as s:
            stmt = select(Donation).where(Donation.stripe_payment_intent_id == payment_intent_id).limit(1)
            d = s.execute(stmt).scalar_one_or_none()
            return _donation_record(d) if d else None

    def update_donation_status(
        self, donation_id: int, status: str, payment_intent_id: Optional[str] = None
    ) -> Optional[DonationRecord]:
        with self._session() as s:
            d = s.get(Donation, donation_id)
            if d is None:
                return None
            d.status = status
            if payment_intent_id:
                d.stripe_payment_intent_id = payment_intent_id
            s.flush()
            return _donation_record(d)
