"""
Payment transactions and the request status sync that follows a payment.

``update_request_status_on_payment`` is a follow-up of a successful payment:
it never fails the payment. Anything that goes wrong is logged and written to
the dead-letter log for an operator to replay.
"""
import logging

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from common.exceptions import InvalidTransition, NotFound, ValidationError
from common.models import DeadLetterKind
from common.queries import fetch_ordered
from common.realtime import push_event, user_group
from common.services import clean_text, coerce_amount, require_fields, service_call
from common.side_effects import record_dead_letter

from .models import TargetType, Transaction, TransactionStatus

logger = logging.getLogger(__name__)

# Request status -> status after a successful payment
PROPERTY_DEAL_ADVANCE = {"Accepted": "Paid", "Pending": "Confirmed"}
PROJECT_ADVANCE = {"Pending": "Confirmed"}

PAYMENT_ADVANCE = {
    TargetType.RENTAL: PROPERTY_DEAL_ADVANCE,
    TargetType.BUY_SELL: PROPERTY_DEAL_ADVANCE,
    TargetType.CONSTRUCTION: PROJECT_ADVANCE,
    TargetType.RENOVATION: PROJECT_ADVANCE,
}


def request_service_for(target_type):
    """The request service that owns ``target_type`` rows, or None."""
    from contracting.services import construction_requests, renovation_requests
    from properties.services import buy_sell_requests, rental_requests

    return {
        TargetType.RENTAL: rental_requests,
        TargetType.BUY_SELL: buy_sell_requests,
        TargetType.CONSTRUCTION: construction_requests,
        TargetType.RENOVATION: renovation_requests,
    }.get(target_type)


def _get(transaction_id):
    try:
        return Transaction.objects.get(pk=transaction_id)
    except (Transaction.DoesNotExist, ValueError, TypeError):
        raise NotFound("Transaction not found")


def _push(txn):
    push_event(
        user_group(txn.user_id),
        "transaction_event",
        {"id": txn.pk, "status": txn.status, "target_type": txn.target_type, "target_id": txn.target_id},
    )


@service_call("Failed to create transaction")
def create(user_id, target_type, target_id, amount, currency=None, status=TransactionStatus.PENDING, reference=""):
    require_fields(
        {"user_id": user_id, "target_type": target_type, "target_id": target_id},
        ["user_id", "target_type", "target_id"],
    )
    if target_type not in TargetType.values:
        raise ValidationError(f"Invalid target type. Must be one of: {', '.join(TargetType.values)}")
    if status not in TransactionStatus.values:
        raise ValidationError("Invalid transaction status")
    amount = coerce_amount(amount, "amount")
    try:
        target_id = int(target_id)
    except (TypeError, ValueError):
        raise ValidationError("target_id must be an integer")
    txn = Transaction.objects.create(
        user_id=user_id,
        target_type=target_type,
        target_id=target_id,
        amount=amount,
        currency=currency or settings.DEFAULT_CURRENCY,
        status=status,
        reference=clean_text(reference, 120),
        settled_at=timezone.now() if status != TransactionStatus.PENDING else None,
    )
    logger.info("transaction %s created for %s:%s (%s)", txn.pk, target_type, target_id, status)
    _push(txn)
    if status == TransactionStatus.SUCCESS:
        update_request_status_on_payment(target_type, target_id)
    return txn


@service_call("Failed to fetch transaction")
def get_by_id(transaction_id):
    return _get(transaction_id)


@service_call("Failed to fetch transactions")
def get_by_user(user_id):
    return fetch_ordered(Transaction.objects.filter(user_id=user_id), "-created_at")


@service_call("Failed to fetch transactions")
def get_all():
    return fetch_ordered(Transaction.objects.all(), "-created_at")


@service_call("Failed to update transaction")
def update_status(transaction_id, status):
    """Move a pending transaction to ``status``; settled ones never change again."""
    if status not in TransactionStatus.values:
        raise ValidationError(f"Invalid status. Must be one of: {', '.join(TransactionStatus.values)}")
    with transaction.atomic():
        try:
            txn = Transaction.objects.select_for_update().get(pk=transaction_id)
        except (Transaction.DoesNotExist, ValueError, TypeError):
            raise NotFound("Transaction not found")
        if txn.status == status:
            return txn
        if txn.is_settled:
            raise InvalidTransition(f"Transaction is already {txn.status}")
        txn.status = status
        update_fields = ["status", "updated_at"]
        if txn.is_settled:
            txn.settled_at = timezone.now()
            update_fields.append("settled_at")
        txn.save(update_fields=update_fields)
    logger.info("transaction %s -> %s", txn.pk, status)
    _push(txn)
    if status == TransactionStatus.SUCCESS:
        update_request_status_on_payment(txn.target_type, txn.target_id)
    return txn


def update_request_status_on_payment(target_type, target_id):
    """Advance the paid-for request one step. Returns the new status, or None when unchanged."""
    advance = PAYMENT_ADVANCE.get(target_type)
    if not advance:
        return None
    try:
        service = request_service_for(target_type)
        current = service.get_by_id(target_id).status
        target = advance.get(current)
        if not target or target == current:
            return None
        with transaction.atomic():
            service.update_status(target_id, target)
        logger.info("payment sync: %s %s %s -> %s", target_type, target_id, current, target)
        return target
    except Exception as exc:
        logger.exception("payment sync failed for %s %s", target_type, target_id)
        record_dead_letter(
            DeadLetterKind.PAYMENT_SYNC, {"target_type": target_type, "target_id": target_id}, exc
        )
        return None
