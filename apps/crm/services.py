"""
Loyalty ledger operations.

Every balance change goes through these functions so the client's
loyalty_points always equals the sum of its LoyaltyTransaction rows, except
where a reversal had to be clamped at zero.
"""

import logging

from django.db import transaction

from apps.core.exceptions import ValidationError
from apps.core.time_resolver import now_ms

from .models import Client, LoyaltyTransaction

logger = logging.getLogger(__name__)


def _positive_points(points):
    if isinstance(points, bool) or not isinstance(points, int) or points <= 0:
        raise ValidationError("Points must be a positive integer", field="points")
    return points


@transaction.atomic
def credit_for_records(client, records, points_per_unit):
    """
    Credit ``points_per_unit`` points for every service record sold to ``client``.

    Product records earn nothing. Returns the created EARNED entries.
    """
    from apps.sales.models import TransactionRecord

    if points_per_unit <= 0:
        return []

    client = Client.objects.select_for_update().get(pk=client.pk)
    entries = []
    for record in records:
        if record.kind != TransactionRecord.SERVICE:
            continue
        entries.append(
            LoyaltyTransaction(
                client=client,
                transaction_type=LoyaltyTransaction.EARNED,
                points=points_per_unit,
                description=f"Service: {record.item_name}",
                record=record,
                staff_id=record.staff_id,
                timestamp=record.timestamp,
            )
        )

    if not entries:
        return []

    LoyaltyTransaction.objects.bulk_create(entries)
    client.loyalty_points += sum(entry.points for entry in entries)
    client.save(update_fields=["loyalty_points", "updated_at"])

    logger.info(f"Credited {len(entries) * points_per_unit} points to client {client.id}")
    return entries


@transaction.atomic
def reverse_for_record(record):
    """
    Reverse every loyalty credit generated by ``record``.

    The balance never goes below zero; each REVERSED entry records the points
    actually removed. Returns the created entries.
    """
    earned = list(
        LoyaltyTransaction.objects.filter(
            record=record, transaction_type=LoyaltyTransaction.EARNED
        ).order_by("timestamp")
    )
    reversals = []
    for entry in earned:
        client = Client.objects.select_for_update().get(pk=entry.client_id)
        removed = min(entry.points, client.loyalty_points)
        client.loyalty_points -= removed
        client.save(update_fields=["loyalty_points", "updated_at"])
        reversals.append(
            LoyaltyTransaction.objects.create(
                client=client,
                transaction_type=LoyaltyTransaction.REVERSED,
                points=-removed,
                description=f"Reversal: {record.item_name}",
                record=record,
                staff_id=entry.staff_id,
                timestamp=now_ms(),
            )
        )
        if removed < entry.points:
            logger.warning(
                f"Reversal for record {record.id} clamped at zero for client {client.id}: "
                f"{removed} of {entry.points} points removed"
            )

    if reversals:
        logger.info(f"Reversed loyalty credits of record {record.id}")
    return reversals


@transaction.atomic
def redeem(client, points, staff=None, reason=""):
    """Redeem points from a client's balance, attributed to ``staff`` when given."""
    points = _positive_points(points)
    client = Client.objects.select_for_update().get(pk=client.pk)
    if points > client.loyalty_points:
        raise ValidationError(
            f"Insufficient points: {client.loyalty_points} available", field="points"
        )

    client.loyalty_points -= points
    client.save(update_fields=["loyalty_points", "updated_at"])

    entry = LoyaltyTransaction.objects.create(
        client=client,
        transaction_type=LoyaltyTransaction.REDEEMED,
        points=-points,
        description=reason or "redeem",
        staff=staff,
        timestamp=now_ms(),
    )
    logger.info(f"Client {client.id} redeemed {points} points")
    return client, entry


@transaction.atomic
def grant(client, points, reason=""):
    """Manually add points to a client's balance."""
    points = _positive_points(points)
    client = Client.objects.select_for_update().get(pk=client.pk)
    client.loyalty_points += points
    client.save(update_fields=["loyalty_points", "updated_at"])

    entry = LoyaltyTransaction.objects.create(
        client=client,
        transaction_type=LoyaltyTransaction.ADJUSTED,
        points=points,
        description=reason or f"Points added: {points}",
        timestamp=now_ms(),
    )
    logger.info(f"Granted {points} points to client {client.id}")
    return client, entry
