"""Monitoring dashboard for the WhatsApp inquiry automation workflow."""

__version__ = "0.1.0"
