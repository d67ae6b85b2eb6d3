"""Deadline reminder sweep for legal obligations.

Each obligation has four one-shot gates: 30, 7 and 1 day before the due date
and once the due date has passed. A gate fires when its date window holds
and its flag is still false; firing sends one email to the company and one
to its agency, then sets the flag whether or not delivery succeeded. Failed
deliveries are therefore not retried until a flag is reset, which never
happens.

The check and the flag write are not atomic. Two sweeps running at the same
time can both send the same reminder. If sweeps run rarely, several gates of
one obligation can fire in the same sweep.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import List, Optional, Protocol, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from notifications.models import RecipientKind
from notifications.services.email import EmailSender, get_email_sender
from notifications.services.templates import build_deadline_email
from utils.app_settings import load_settings
from utils.audit import now_utc_naive, today_utc

from . import repository
from .models import (
    Agency,
    Company,
    LegalObligation,
    NotificationDelivery,
    NotificationGate,
    ObligationStatus,
)

logger = logging.getLogger(__name__)

GATE_ORDER: Sequence[NotificationGate] = (
    NotificationGate.DAYS_30,
    NotificationGate.DAYS_7,
    NotificationGate.DAYS_1,
    NotificationGate.EXPIRED,
)

_EXPIRED_GATE_STATUSES = (ObligationStatus.ACTIVE.value, ObligationStatus.EXPIRED.value)


@dataclass(frozen=True)
class Recipient:
    kind: RecipientKind
    name: Optional[str]
    email: Optional[str]


@dataclass(frozen=True)
class Recipients:
    company_name: Optional[str]
    company: Optional[Recipient]
    agency: Optional[Recipient]


class RecipientDirectory(Protocol):
    """Resolves who should hear about an obligation."""

    def resolve(self, session: Session, obligation: LegalObligation) -> Recipients:
        ...


class MissingCompanyError(LookupError):
    """Raised when an obligation points at a company that does not exist."""

    def __init__(self, obligation_id: int, company_id: int):
        super().__init__(f"obligation {obligation_id}: company {company_id} not found")
        self.obligation_id = obligation_id
        self.company_id = company_id


class DatabaseRecipientDirectory:
    """Looks up company and agency addresses in the companies/agencies tables."""

    def resolve(self, session: Session, obligation: LegalObligation) -> Recipients:
        company = session.get(Company, obligation.company_id)
        if company is None:
            raise MissingCompanyError(obligation.id, obligation.company_id)
        agency_recipient = None
        if obligation.agency_id:
            agency = session.get(Agency, obligation.agency_id)
            if agency is not None:
                agency_recipient = Recipient("agency", agency.name, agency.email)
            else:
                logger.warning(
                    "Obligation %s references missing agency %s",
                    obligation.id,
                    obligation.agency_id,
                )
        return Recipients(
            company_name=company.name,
            company=Recipient("company", company.name, company.contact_email),
            agency=agency_recipient,
        )


@dataclass
class DeliveryOutcome:
    obligation_id: int
    gate: str
    recipient_kind: RecipientKind
    address: Optional[str]
    ok: bool
    error: Optional[str] = None


@dataclass
class SweepResult:
    sent: int = 0
    delivered: int = 0
    failed: int = 0
    errors: List[str] = field(default_factory=list)
    deliveries: List[DeliveryOutcome] = field(default_factory=list)


def gate_applies(gate: NotificationGate, obligation: LegalObligation, today: date) -> bool:
    """Whether ``gate`` should fire for ``obligation`` on ``today``."""
    if getattr(obligation, gate.flag):
        return False
    due = obligation.due_date
    if gate is NotificationGate.EXPIRED:
        return obligation.status in _EXPIRED_GATE_STATUSES and due < today
    if obligation.status != ObligationStatus.ACTIVE.value:
        return False
    return today < due <= today + timedelta(days=gate.horizon_days)


def _candidate_ids(gate: NotificationGate, today: date) -> list[int]:
    flag_column = getattr(LegalObligation, gate.flag)
    stmt = select(LegalObligation.id).where(flag_column.is_(False))
    if gate is NotificationGate.EXPIRED:
        stmt = stmt.where(
            LegalObligation.status.in_(_EXPIRED_GATE_STATUSES),
            LegalObligation.due_date < today,
        )
    else:
        stmt = stmt.where(
            LegalObligation.status == ObligationStatus.ACTIVE.value,
            LegalObligation.due_date > today,
            LegalObligation.due_date <= today + timedelta(days=gate.horizon_days),
        )
    with repository.with_session() as session:
        return list(session.scalars(stmt.order_by(LegalObligation.due_date, LegalObligation.id)))


def _days_remaining(gate: NotificationGate, due: date, today: date) -> int:
    if gate is NotificationGate.EXPIRED:
        return 0
    return max((due - today).days, 1)


def _deliver(
    sender: EmailSender,
    obligation: LegalObligation,
    gate: NotificationGate,
    recipients: Recipients,
    recipient: Optional[Recipient],
    frontend_url: str,
    today: date,
) -> Optional[DeliveryOutcome]:
    if recipient is None:
        return None
    if not recipient.email:
        logger.warning(
            "Obligation %s gate %s: %s has no email address",
            obligation.id,
            gate.value,
            recipient.kind,
        )
        return DeliveryOutcome(obligation.id, gate.value, recipient.kind, None, False, "no email address")
    message = build_deadline_email(
        to=recipient.email,
        description=obligation.description,
        due_date=obligation.due_date,
        days_remaining=_days_remaining(gate, obligation.due_date, today),
        company_name=recipients.company_name,
        worker_name=obligation.worker_name,
        legal_basis=obligation.legal_basis,
        frontend_url=frontend_url,
        obligation_id=obligation.id,
    )
    try:
        sender.send(message)
    except Exception as exc:
        logger.exception(
            "Failed to email %s %s for obligation %s (gate %s)",
            recipient.kind,
            recipient.email,
            obligation.id,
            gate.value,
        )
        return DeliveryOutcome(obligation.id, gate.value, recipient.kind, recipient.email, False, str(exc))
    return DeliveryOutcome(obligation.id, gate.value, recipient.kind, recipient.email, True)


def _fire_gate(
    obligation_id: int,
    gate: NotificationGate,
    today: date,
    sender: EmailSender,
    directory: RecipientDirectory,
    frontend_url: str,
) -> Optional[list[DeliveryOutcome]]:
    """Fire one gate for one obligation. ``None`` means it no longer applied."""
    with repository.with_session() as session:
        # re-read: an earlier gate or another sweep may have changed the row
        obligation = session.get(LegalObligation, obligation_id)
        if obligation is None or not gate_applies(gate, obligation, today):
            return None
        recipients = directory.resolve(session, obligation)
        outcomes = [
            outcome
            for outcome in (
                _deliver(sender, obligation, gate, recipients, recipients.company, frontend_url, today),
                _deliver(sender, obligation, gate, recipients, recipients.agency, frontend_url, today),
            )
            if outcome is not None
        ]
        setattr(obligation, gate.flag, True)
        if gate is NotificationGate.EXPIRED:
            obligation.status = ObligationStatus.EXPIRED.value
        obligation.updated_at = now_utc_naive()
        for outcome in outcomes:
            session.add(
                NotificationDelivery(
                    obligation_id=outcome.obligation_id,
                    gate=outcome.gate,
                    recipient_kind=outcome.recipient_kind,
                    address=outcome.address,
                    ok=outcome.ok,
                    error=outcome.error,
                )
            )
    return outcomes


def check_and_send_notifications(
    *,
    today: Optional[date] = None,
    sender: Optional[EmailSender] = None,
    directory: Optional[RecipientDirectory] = None,
) -> SweepResult:
    """Run every gate over all obligations and send the reminders that are due."""
    today = today or today_utc()
    settings = load_settings()
    sender = sender or get_email_sender(settings)
    directory = directory or DatabaseRecipientDirectory()
    result = SweepResult()

    for gate in GATE_ORDER:
        for obligation_id in _candidate_ids(gate, today):
            try:
                outcomes = _fire_gate(
                    obligation_id, gate, today, sender, directory, settings.frontend_url
                )
            except Exception as exc:
                logger.exception("Gate %s failed for obligation %s", gate.value, obligation_id)
                result.errors.append(f"obligation {obligation_id} gate {gate.value}: {exc}")
                continue
            if outcomes is None:
                continue
            result.sent += 1
            result.deliveries.extend(outcomes)
            result.delivered += sum(1 for o in outcomes if o.ok)
            result.failed += sum(1 for o in outcomes if not o.ok)

    logger.info(
        "Deadline sweep for %s: %s gates fired, %s delivered, %s failed, %s errors",
        today.isoformat(),
        result.sent,
        result.delivered,
        result.failed,
        len(result.errors),
    )
    return result


__all__ = [
    "DatabaseRecipientDirectory",
    "DeliveryOutcome",
    "MissingCompanyError",
    "Recipient",
    "Recipients",
    "RecipientDirectory",
    "SweepResult",
    "check_and_send_notifications",
    "gate_applies",
]
