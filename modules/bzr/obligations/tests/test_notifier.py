from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy import select

from modules.bzr.obligations import detector, notifier, repository, services
from modules.bzr.obligations.models import LegalObligation, NotificationDelivery, NotificationGate
from notifications.services.email import EmailDeliveryError

TODAY = date(2025, 3, 1)


class RecordingSender:
    def __init__(self, failing=()):
        self.failing = set(failing)
        self.sent = []

    def send(self, message):
        if message.to in self.failing:
            raise EmailDeliveryError(message.to, "mailbox unavailable")
        self.sent.append(message)


def _seed(*due_dates, with_agency=True):
    agency_id = services.add_agency("Agencija Zastita", "agencija@zastita.rs") if with_agency else None
    company_id = services.add_company(
        "Metal d.o.o.",
        email="info@metal.rs",
        owner_email="vlasnik@metal.rs",
        agency_id=agency_id,
    )
    for idx, due in enumerate(due_dates):
        services.add_equipment_inspection(company_id, f"Masina {idx + 1}", next_inspection=due)
    detector.sync_obligations(company_id, today=TODAY)
    with repository.with_session() as session:
        ids = list(session.scalars(select(LegalObligation.id).order_by(LegalObligation.id)))
    return company_id, ids


def _row(obligation_id):
    return services.get_obligation(obligation_id)


def test_thirty_day_gate_fires_once():
    _, [obligation_id] = _seed(date(2025, 3, 25))
    sender = RecordingSender()

    result = notifier.check_and_send_notifications(today=TODAY, sender=sender)

    assert result.sent == 1
    assert result.delivered == 2
    assert result.failed == 0
    assert sorted(m.to for m in sender.sent) == ["agencija@zastita.rs", "vlasnik@metal.rs"]
    subject = sender.sent[0].subject
    assert subject == "Istice za 24 dana: Pregled opreme: Masina 1 - Metal d.o.o."
    row = _row(obligation_id)
    assert row.notified_30 and not row.notified_7 and not row.notified_1

    again = notifier.check_and_send_notifications(today=TODAY, sender=sender)
    assert again.sent == 0
    assert len(sender.sent) == 2


def test_gates_progress_through_the_schedule():
    _, [obligation_id] = _seed(date(2025, 3, 25))
    sender = RecordingSender()
    for day in (TODAY, date(2025, 3, 20), date(2025, 3, 24), date(2025, 3, 26)):
        notifier.check_and_send_notifications(today=day, sender=sender)

    gates = [d.gate for d in _deliveries(obligation_id) if d.recipient_kind == "company"]
    assert gates == ["30", "7", "1", "expired"]
    subjects = [m.subject.split(":")[0] for m in sender.sent if m.to == "vlasnik@metal.rs"]
    assert subjects == ["Istice za 24 dana", "Istice za 5 dana", "Istice SUTRA", "ISTEKAO ROK"]
    row = _row(obligation_id)
    assert row.status == "istekao"
    assert all((row.notified_30, row.notified_7, row.notified_1, row.notified_expired))


def _deliveries(obligation_id):
    with repository.with_session() as session:
        return list(
            session.scalars(
                select(NotificationDelivery)
                .where(NotificationDelivery.obligation_id == obligation_id)
                .order_by(NotificationDelivery.id)
            )
        )


def test_late_sweep_fires_every_open_gate():
    _, [obligation_id] = _seed(date(2025, 3, 2))
    result = notifier.check_and_send_notifications(today=TODAY, sender=RecordingSender())
    assert result.sent == 3
    row = _row(obligation_id)
    assert row.notified_30 and row.notified_7 and row.notified_1
    assert not row.notified_expired


def test_expired_gate_fires_for_rows_already_expired_by_sync():
    # due before the sync date, so the sync already moved it to istekao
    _, [obligation_id] = _seed(date(2025, 2, 10))
    assert _row(obligation_id).status == "istekao"
    sender = RecordingSender()

    result = notifier.check_and_send_notifications(today=TODAY, sender=sender)

    assert result.sent == 1
    assert {m.subject.split(":")[0] for m in sender.sent} == {"ISTEKAO ROK"}
    assert _row(obligation_id).notified_expired


def test_completed_obligations_never_notify():
    _, [obligation_id] = _seed(date(2025, 3, 20))
    services.mark_complete(obligation_id)
    sender = RecordingSender()
    result = notifier.check_and_send_notifications(today=date(2025, 4, 1), sender=sender)
    assert result.sent == 0
    assert sender.sent == []


def test_failed_delivery_still_sets_flag():
    _, [obligation_id] = _seed(date(2025, 3, 20))
    sender = RecordingSender(failing={"vlasnik@metal.rs"})

    result = notifier.check_and_send_notifications(today=TODAY, sender=sender)

    assert result.sent == 1
    assert result.delivered == 1
    assert result.failed == 1
    failed = [d for d in result.deliveries if not d.ok]
    assert failed[0].recipient_kind == "company"
    assert "mailbox unavailable" in failed[0].error
    assert _row(obligation_id).notified_30
    stored = _deliveries(obligation_id)
    assert sorted((d.recipient_kind, d.ok) for d in stored) == [("agency", True), ("company", False)]


def test_company_without_agency_gets_single_email():
    _seed(date(2025, 3, 20), with_agency=False)
    sender = RecordingSender()
    result = notifier.check_and_send_notifications(today=TODAY, sender=sender)
    assert result.delivered == 1
    assert [m.to for m in sender.sent] == ["vlasnik@metal.rs"]


class FlakyDirectory(notifier.DatabaseRecipientDirectory):
    def __init__(self, broken_id):
        self.broken_id = broken_id

    def resolve(self, session, obligation):
        if obligation.id == self.broken_id:
            raise notifier.MissingCompanyError(obligation.id, obligation.company_id)
        return super().resolve(session, obligation)


def test_one_broken_record_does_not_stop_the_sweep():
    _, [broken, healthy] = _seed(date(2025, 3, 20), date(2025, 3, 21))
    sender = RecordingSender()

    result = notifier.check_and_send_notifications(
        today=TODAY, sender=sender, directory=FlakyDirectory(broken)
    )

    assert result.sent == 1
    assert len(result.errors) == 1
    assert f"obligation {broken}" in result.errors[0]
    assert not _row(broken).notified_30
    assert _row(healthy).notified_30


@pytest.mark.parametrize(
    "gate, due, expected",
    [
        (NotificationGate.DAYS_30, date(2025, 3, 31), True),
        (NotificationGate.DAYS_30, date(2025, 4, 1), False),
        (NotificationGate.DAYS_7, date(2025, 3, 8), True),
        (NotificationGate.DAYS_1, date(2025, 3, 2), True),
        (NotificationGate.DAYS_1, date(2025, 3, 1), False),
        (NotificationGate.EXPIRED, date(2025, 2, 28), True),
        (NotificationGate.EXPIRED, date(2025, 3, 1), False),
    ],
)
def test_gate_windows(gate, due, expected):
    obligation = LegalObligation(
        due_date=due,
        status="aktivan",
        notified_30=False,
        notified_7=False,
        notified_1=False,
        notified_expired=False,
    )
    assert notifier.gate_applies(gate, obligation, TODAY) is expected


def test_gate_does_not_apply_once_flagged():
    obligation = LegalObligation(
        due_date=date(2025, 3, 5),
        status="aktivan",
        notified_30=True,
        notified_7=False,
        notified_1=False,
        notified_expired=False,
    )
    assert not notifier.gate_applies(NotificationGate.DAYS_30, obligation, TODAY)
    assert notifier.gate_applies(NotificationGate.DAYS_7, obligation, TODAY)


def test_sweep_without_smtp_host_records_failures():
    _, [obligation_id] = _seed(date(2025, 3, 20))

    result = notifier.check_and_send_notifications(today=TODAY)

    assert result.sent == 1
    assert result.delivered == 0
    assert result.failed == 2
    assert all("BZR_SMTP_HOST" in outcome.error for outcome in result.deliveries)
    with repository.with_session() as session:
        rows = list(session.scalars(select(NotificationDelivery)))
    assert [row.ok for row in rows] == [False, False]
    assert _row(obligation_id).notified_30
