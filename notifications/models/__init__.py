from .notification import OutboundEmail, RecipientKind, Severity

__all__ = ["OutboundEmail", "RecipientKind", "Severity"]
