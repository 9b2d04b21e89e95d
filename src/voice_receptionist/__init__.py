"""Voice-enabled AI receptionist: respond API and conversational console."""

__version__ = "0.1.0"
