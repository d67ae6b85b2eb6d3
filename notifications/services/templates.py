"""Text templates for deadline reminder emails."""

from __future__ import annotations

from datetime import date
from typing import Optional

from notifications.models.notification import OutboundEmail, Severity


def urgency_text(days_remaining: int) -> str:
    """``0`` means the deadline has already passed."""
    if days_remaining <= 0:
        return "ISTEKAO ROK"
    if days_remaining == 1:
        return "Istice SUTRA"
    return f"Istice za {days_remaining} dana"


def urgency_severity(days_remaining: int) -> Severity:
    if days_remaining <= 0:
        return "error"
    if days_remaining <= 7:
        return "warning"
    return "info"


def build_deadline_email(
    *,
    to: str,
    description: str,
    due_date: date,
    days_remaining: int,
    company_name: Optional[str],
    worker_name: Optional[str] = None,
    legal_basis: Optional[str] = None,
    frontend_url: str,
    obligation_id: Optional[int] = None,
) -> OutboundEmail:
    urgency = urgency_text(days_remaining)
    subject = f"{urgency}: {description} - {company_name or ''}".rstrip(" -")
    lines = [
        f"Podsetnik: {urgency}",
        "",
        f"Kompanija: {company_name or 'N/A'}",
        f"Obaveza: {description}",
        f"Rok: {due_date.isoformat()}",
    ]
    if worker_name:
        lines.append(f"Zaposleni: {worker_name}")
    if legal_basis:
        lines.append(f"Pravni osnov: {legal_basis}")
    lines += [
        "",
        f"Pogledaj evidencije: {frontend_url}/app/evidencije",
        "",
        "BZR Savetnik - Automatsko obavestenje o isteku zakonske obaveze",
    ]
    return OutboundEmail(
        to=to,
        subject=subject,
        body="\n".join(lines),
        severity=urgency_severity(days_remaining),
        entity_type="legal_obligation",
        entity_id=str(obligation_id) if obligation_id is not None else None,
    )


__all__ = ["build_deadline_email", "urgency_severity", "urgency_text"]
