"""
Cart Module - Service Layer
==============================
Cart management: get/create, add/remove items, discounts, calculate totals.
Carts never touch the transaction log or customer balances.
"""

from dataclasses import dataclass, asdict
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from modules.cart.models import Cart, CartItem
from modules.catalog.service import catalog_service
from modules.customer.service import customer_service


# ==========================================
# Pure pricing
# ==========================================

@dataclass(frozen=True)
class LineAmounts:
    product_id: int
    product_name: str
    unit_price: int
    quantity: int
    gross: int
    discount: int   # effective (clamped) discount


@dataclass(frozen=True)
class CartTotals:
    subtotal: int
    discount: int
    total: int

    def as_dict(self) -> dict:
        return asdict(self)


def clamp_discount(gross: int, discount: int) -> int:
    """A line discount is bounded to [0, gross] so a line never goes negative."""
    return max(0, min(int(discount or 0), gross))


def compute_totals(lines: Iterable[Tuple[int, int, int]]) -> CartTotals:
    """
    Totals for (unit_price, quantity, discount) tuples.
    subtotal = Σ qty × price, discount = Σ clamped discount, total = subtotal − discount ≥ 0.
    """
    subtotal = 0
    discount = 0
    for unit_price, quantity, line_discount in lines:
        gross = unit_price * quantity
        subtotal += gross
        discount += clamp_discount(gross, line_discount)
    return CartTotals(subtotal=subtotal, discount=discount, total=subtotal - discount)


# ==========================================
# Service
# ==========================================

class CartService:

    def get_or_create_cart(self, db: Session, cashier_id: int) -> Cart:
        """Get existing cart or create new one for cashier."""
        cart = db.query(Cart).filter(Cart.cashier_id == cashier_id).first()
        if not cart:
            cart = Cart(cashier_id=cashier_id)
            db.add(cart)
            db.flush()
        return cart

    def add_product(self, db: Session, cashier_id: int, product_id: int) -> CartItem:
        """Add one unit: bump an existing line or append a new one. No stock check."""
        product = catalog_service.require_product(db, product_id)
        cart = self.get_or_create_cart(db, cashier_id)

        item = self._find_item(cart, product.id)
        if item:
            item.quantity += 1
        else:
            item = CartItem(product=product, quantity=1, discount=0)
            cart.items.append(item)

        db.flush()
        return item

    def remove_product(self, db: Session, cashier_id: int, product_id: int) -> None:
        """Drop the whole line regardless of quantity."""
        cart = self.get_or_create_cart(db, cashier_id)
        item = self._find_item(cart, product_id)
        if item:
            cart.items.remove(item)
            db.flush()

    def set_quantity(self, db: Session, cashier_id: int, product_id: int, quantity: int) -> Optional[CartItem]:
        """
        Replace the quantity of an existing line.
        quantity <= 0 removes the line; a missing line is never created.
        """
        if quantity <= 0:
            self.remove_product(db, cashier_id, product_id)
            return None
        cart = self.get_or_create_cart(db, cashier_id)
        item = self._find_item(cart, product_id)
        if item:
            item.quantity = quantity
            db.flush()
        return item

    def set_discount(self, db: Session, cashier_id: int, product_id: int, amount: int) -> Optional[CartItem]:
        """Replace the line discount as given; bounds are applied by compute_totals."""
        cart = self.get_or_create_cart(db, cashier_id)
        item = self._find_item(cart, product_id)
        if item:
            item.discount = int(amount)
            db.flush()
        return item

    def bind_customer(self, db: Session, cashier_id: int, customer_id: Optional[int]) -> Cart:
        """Attach a customer to the cart (None unbinds)."""
        cart = self.get_or_create_cart(db, cashier_id)
        if customer_id is not None:
            customer_service.get(db, customer_id)
        cart.customer_id = customer_id
        db.flush()
        return cart

    def clear(self, db: Session, cashier_id: int) -> None:
        """Remove all lines and unbind the customer."""
        cart = db.query(Cart).filter(Cart.cashier_id == cashier_id).first()
        if cart:
            cart.items.clear()
            cart.customer_id = None
            db.flush()

    def total(self, db: Session, cashier_id: int) -> CartTotals:
        cart = self.get_or_create_cart(db, cashier_id)
        return self.cart_totals(cart)

    # ==========================================
    # Line helpers (shared with settlement)
    # ==========================================

    def line_amounts(self, cart: Cart) -> List[LineAmounts]:
        result = []
        for item in cart.items:
            price = int(item.product.price)
            gross = price * item.quantity
            result.append(LineAmounts(
                product_id=item.product_id,
                product_name=item.product.name,
                unit_price=price,
                quantity=item.quantity,
                gross=gross,
                discount=clamp_discount(gross, item.discount),
            ))
        return result

    def cart_totals(self, cart: Cart) -> CartTotals:
        return compute_totals(
            (int(item.product.price), item.quantity, item.discount) for item in cart.items
        )

    def _find_item(self, cart: Cart, product_id: int) -> Optional[CartItem]:
        for item in cart.items:
            if item.product_id == product_id:
                return item
        return None


# Singleton
cart_service = CartService()
