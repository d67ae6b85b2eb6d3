from dataclasses import dataclass
from typing import Literal, Optional

Severity = Literal['info', 'success', 'warning', 'error']
RecipientKind = Literal['company', 'agency']


@dataclass(frozen=True)
class OutboundEmail:
    to: str
    subject: str
    body: str
    severity: Severity = 'info'
    source: str = 'BZR Savetnik'
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
