"""TRACS Risk Intake: scoring and visibility engine for vendor risk intake forms."""

__version__ = "0.1.0"
