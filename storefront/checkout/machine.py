"""
Tunnel de commande: IDENTIFY -> SHIPPING_DETAILS -> PAYMENT -> CONFIRMED.

- identify(): exige une identité connectée, puis pré-remplit les coordonnées
- update_shipping()/submit_shipping(): saisie et validation des coordonnées
- pay(): passerelle de paiement puis création de la commande
- back()/close()/continue_shopping(): navigation et remise à zéro
- start(buy_now=item): achat immédiat d'un seul article, sans toucher au panier

Les erreurs de paiement ne font jamais planter la machine: elles deviennent une
notification et l'étape courante est conservée (ou restaurée après annulation).
"""
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional
import logging

from storefront.auth.identity import Identity, IdentityProvider
from storefront.cart.models import CartItem
from storefront.cart.store import CartStore
from storefront.checkout.errors import (
    CancelledByUser,
    CheckoutError,
    InvalidTransition,
    PaymentFailed,
    PersistenceFailed,
    VerificationFailed,
)
from storefront.checkout.models import CheckoutStep, ShippingDetails
from storefront.checkout.notifier import NotificationQueue, Notifier
from storefront.checkout.validation import FieldError, normalize_phone, validate_shipping
from storefront.config import CHECKOUT_CURRENCY, SHIPPING_FEE
from storefront.orders.models import Order, OrderStatus, PaymentStatus
from storefront.orders.repository import OrderRepository
from storefront.orders.service import build_order, generate_order_number
from storefront.payments.gateway import PaymentGateway, VerifiedPayment
from storefront.profiles.service import ProfileAutofillService

logger = logging.getLogger(__name__)

_SHIPPING_FIELDS = set(ShippingDetails.model_fields)


@dataclass(frozen=True)
class _Snapshot:
    step: CheckoutStep
    shipping: ShippingDetails


class CheckoutStateMachine:
    def __init__(
        self,
        *,
        cart: CartStore,
        identity_provider: IdentityProvider,
        autofill: ProfileAutofillService,
        gateway: PaymentGateway,
        orders: OrderRepository,
        notifier: Optional[Notifier] = None,
        shipping_fee: int = SHIPPING_FEE,
        currency: str = CHECKOUT_CURRENCY,
        order_number_factory: Callable[[], str] = generate_order_number,
    ):
        self.cart = cart
        self.identity_provider = identity_provider
        self.autofill = autofill
        self.gateway = gateway
        self.orders = orders
        self.notifier = notifier or NotificationQueue()
        self.shipping_fee = shipping_fee
        self.currency = currency
        self._order_number_factory = order_number_factory
        self._reset()

    def _reset(self, buy_now: Optional[CartItem] = None) -> None:
        self.step = CheckoutStep.IDENTIFY
        self.identity: Optional[Identity] = None
        self.shipping = ShippingDetails()
        self.field_errors: List[FieldError] = []
        self.autofill_source: Optional[str] = None
        self.submitting = False
        self.confirmed_order: Optional[Order] = None
        self.buy_now = buy_now.model_copy() if buy_now else None
        # Une tentative = un receipt, réutilisé pour tous les essais de paiement
        self._order_number: Optional[str] = None
        self._receipt_amount: Optional[int] = None
        self._verified: Optional[VerifiedPayment] = None

    # --- Montants ---

    @property
    def items(self) -> List[CartItem]:
        return [self.buy_now.model_copy()] if self.buy_now else self.cart.items

    @property
    def subtotal(self) -> int:
        return sum(i.line_total for i in self.items)

    @property
    def shipping_cost(self) -> int:
        return self.shipping_fee if self.items else 0

    @property
    def total(self) -> int:
        return self.subtotal + self.shipping_cost

    @property
    def order_number(self) -> Optional[str]:
        return self._order_number

    # --- Navigation ---

    def start(self, buy_now: Optional[CartItem] = None) -> None:
        self._reset(buy_now)

    def close(self) -> None:
        if self.submitting:
            logger.warning("checkout.machine.close during submission order_number=%s", self._order_number)
        self._reset()

    def continue_shopping(self) -> None:
        if self.step is not CheckoutStep.CONFIRMED:
            raise InvalidTransition()
        self._reset()

    def back(self) -> bool:
        if self.submitting:
            return False
        if self.step is CheckoutStep.SHIPPING_DETAILS:
            self.step = CheckoutStep.IDENTIFY
            return True
        if self.step is CheckoutStep.PAYMENT:
            self.step = CheckoutStep.SHIPPING_DETAILS
            return True
        return False

    def _require(self, step: CheckoutStep) -> None:
        if self.step is not step:
            raise InvalidTransition(f"Expected step {step.value}, current step is {self.step.value}")

    # --- Étape 1: identification ---

    async def identify(self) -> bool:
        self._require(CheckoutStep.IDENTIFY)
        identity = await self.identity_provider.current_identity()
        if identity is None:
            await self.identity_provider.request_sign_in()
            self.notifier.info("Please sign in to continue to checkout")
            return False
        self.identity = identity
        self.step = CheckoutStep.SHIPPING_DETAILS
        if self.shipping.is_blank():
            # Après un retour arrière la saisie en cours est conservée
            result = await self.autofill.autofill(identity)
            self.shipping = result.details
            self.autofill_source = result.source
        return True

    # --- Étape 2: coordonnées ---

    def update_shipping(self, **fields: str) -> ShippingDetails:
        self._require(CheckoutStep.SHIPPING_DETAILS)
        unknown = set(fields) - _SHIPPING_FIELDS
        if unknown:
            raise ValueError(f"Unknown shipping fields: {', '.join(sorted(unknown))}")
        self.shipping = self.shipping.model_copy(update=fields)
        return self.shipping

    async def submit_shipping(self) -> bool:
        self._require(CheckoutStep.SHIPPING_DETAILS)
        self.field_errors = validate_shipping(self.shipping)
        if self.field_errors:
            self.notifier.error(self.field_errors[0].message)
            return False
        self.shipping = self.shipping.model_copy(update={"phone": normalize_phone(self.shipping.phone)})
        await self.autofill.save(self.identity, self.shipping)
        self.step = CheckoutStep.PAYMENT
        return True

    # --- Étape 3: paiement ---

    def _back_to_shipping(self, message: str) -> None:
        self.step = CheckoutStep.SHIPPING_DETAILS
        self.notifier.error(message)

    async def pay(self) -> Optional[Order]:
        self._require(CheckoutStep.PAYMENT)
        if self.submitting:
            self.notifier.info("Your payment is already being processed")
            return None

        self.field_errors = validate_shipping(self.shipping)
        if self.field_errors:
            self._back_to_shipping(self.field_errors[0].message)
            return None
        items = self.items
        if not items or self.total <= 0:
            self._back_to_shipping("Your cart is empty")
            return None

        subtotal = sum(i.line_total for i in items)
        shipping_cost = self.shipping_fee
        total = subtotal + shipping_cost
        if self._order_number is None or self._receipt_amount != total:
            # Montant modifié: nouvelle tentative, nouveau receipt
            if self._order_number is not None:
                logger.info(
                    "checkout.machine.pay amount changed old_receipt=%s old_amount=%s amount=%s",
                    self._order_number, self._receipt_amount, total,
                )
            self._order_number = self._order_number_factory()
            self._receipt_amount = total
            self._verified = None
        receipt = self._order_number

        self.submitting = True
        try:
            payment = self._verified
            if payment is None or payment.amount != total:
                payment = await self._collect(receipt, total, len(items))
                if payment is None:
                    return None
                self._verified = payment
            return await self._place_order(payment, items, shipping_cost)
        finally:
            self.submitting = False

    async def _collect(self, receipt: str, total: int, item_count: int) -> Optional[VerifiedPayment]:
        snapshot = _Snapshot(step=self.step, shipping=self.shipping.model_copy())
        notes: Dict[str, str] = {
            "order_number": receipt,
            "customer_email": self.shipping.email,
            "items": str(item_count),
        }
        prefill = {
            "name": self.shipping.full_name,
            "email": self.shipping.email,
            "contact": self.shipping.phone,
        }
        try:
            return await self.gateway.collect_payment(
                amount=total,
                currency=self.currency,
                receipt=receipt,
                notes=notes,
                prefill=prefill,
                description=f"Order {receipt}",
            )
        except CancelledByUser as e:
            self.step = snapshot.step
            self.shipping = snapshot.shipping
            logger.info("checkout.machine.pay cancelled by user receipt=%s", receipt)
            self.notifier.info(e.user_message)
        except VerificationFailed as e:
            logger.error(
                "checkout.machine.pay verification failed receipt=%s payment_reference=%s reason=%s",
                receipt, e.payment_reference, e.reason,
            )
            self.notifier.error(e.user_message)
        except CheckoutError as e:
            logger.warning("checkout.machine.pay %s receipt=%s", type(e).__name__, receipt)
            self.notifier.error(e.user_message)
        except Exception:
            logger.exception("checkout.machine.pay gateway failed receipt=%s", receipt)
            self.notifier.error(PaymentFailed().user_message)
        return None

    async def _place_order(self, payment: VerifiedPayment, items: List[CartItem], shipping_cost: int) -> Optional[Order]:
        order = build_order(
            order_number=payment.receipt,
            user_id=self.identity.id if self.identity else None,
            email=(self.identity.email if self.identity else "") or self.shipping.email,
            items=items,
            shipping=self.shipping,
            shipping_cost=shipping_cost,
            currency=payment.currency,
            payment_reference=payment.payment_id,
            gateway_order_id=payment.gateway_order_id,
            payment_status=PaymentStatus.COMPLETED,
            status=OrderStatus.CONFIRMED,
        )
        result = await self.orders.create(order)
        if result.error:
            error = PersistenceFailed(payment.payment_id, reason=str(result.error))
            logger.critical(
                "checkout.machine.pay order creation failed receipt=%s payment_reference=%s error=%s",
                payment.receipt, payment.payment_id, result.error,
            )
            self.notifier.error(error.user_message)
            return None

        order.id = result.data
        self.confirmed_order = order
        if self.buy_now is None:
            self.cart.clear()
        if self.identity:
            await self.autofill.save(self.identity, self.shipping)
        self.step = CheckoutStep.CONFIRMED
        logger.info("checkout.machine.pay order confirmed order_number=%s id=%s", order.order_number, order.id)
        self.notifier.success(f"Order {order.order_number} placed successfully")
        return order
