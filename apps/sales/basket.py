"""
Immutable basket values handed to the checkout.

A Basket is built from the request, passed to TransactionCommitter, and never
outlives that call. Quantities only exist here: units() expands every line
into one write request per unit.
"""

import re
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Iterator, Optional, Tuple

from apps.sales.models import TransactionRecord


@dataclass(frozen=True)
class LineItem:
    catalog_item_id: str
    name: str
    unit_price: Decimal
    quantity: int = 1

    def as_dict(self):
        return {
            "id": self.catalog_item_id,
            "name": self.name,
            "price": str(self.unit_price),
            "quantity": self.quantity,
        }


@dataclass(frozen=True)
class NewClientDraft:
    first_name: str
    last_name: str
    phone: str

    def normalized(self) -> "NewClientDraft":
        """Collapse whitespace in names and keep only the decimal digits of the phone."""
        return NewClientDraft(
            first_name=" ".join((self.first_name or "").split()),
            last_name=" ".join((self.last_name or "").split()),
            phone=re.sub(r"\D", "", self.phone or ""),
        )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def as_dict(self):
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "phone": self.phone,
        }


@dataclass(frozen=True)
class UnitRequest:
    """One ledger write: a single unit of a line item."""

    kind: str
    catalog_item_id: str
    name: str
    amount: Decimal


@dataclass(frozen=True)
class Basket:
    staff_id: str
    payment_method: str
    services: Tuple[LineItem, ...] = ()
    products: Tuple[LineItem, ...] = ()
    client_id: Optional[str] = None
    new_client: Optional[NewClientDraft] = None
    checkout_at: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "services", tuple(self.services))
        object.__setattr__(self, "products", tuple(self.products))

    @property
    def is_empty(self) -> bool:
        return not self.services and not self.products

    @property
    def unit_count(self) -> int:
        return sum(item.quantity for item in self.services + self.products)

    def lines(self) -> Iterator[Tuple[str, LineItem]]:
        """Line items in submission order: services first, then products."""
        for item in self.services:
            yield TransactionRecord.SERVICE, item
        for item in self.products:
            yield TransactionRecord.PRODUCT, item

    def units(self) -> Iterator[UnitRequest]:
        """Decompose the basket into one request per unit, in submission order."""
        for kind, item in self.lines():
            for _ in range(item.quantity):
                yield UnitRequest(
                    kind=kind,
                    catalog_item_id=item.catalog_item_id,
                    name=item.name,
                    amount=item.unit_price,
                )

    def remainder(self, committed: int, client_id: Optional[str] = None) -> "Basket":
        """
        Basket holding exactly the units after the first ``committed`` ones.

        ``client_id`` replaces a new-client draft once that client exists, so
        retrying the remainder does not create the client twice.
        """
        skip = committed
        services, products = [], []
        for kind, item in self.lines():
            if skip >= item.quantity:
                skip -= item.quantity
                continue
            left = replace(item, quantity=item.quantity - skip)
            skip = 0
            if kind == TransactionRecord.SERVICE:
                services.append(left)
            else:
                products.append(left)

        return replace(
            self,
            services=tuple(services),
            products=tuple(products),
            client_id=client_id or self.client_id,
            new_client=None if client_id else self.new_client,
        )

    def as_dict(self):
        return {
            "staff_id": str(self.staff_id),
            "client_id": str(self.client_id) if self.client_id else None,
            "new_client": self.new_client.as_dict() if self.new_client else None,
            "payment_method": self.payment_method,
            "checkout_at": self.checkout_at,
            "services": [item.as_dict() for item in self.services],
            "products": [item.as_dict() for item in self.products],
        }
