"""GlowUp: human-in-the-loop coaching chat, triage and routing engine."""

__version__ = "0.1.0"
