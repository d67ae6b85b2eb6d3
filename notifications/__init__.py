"""Outbound notifications: email message model, templates and transports."""
