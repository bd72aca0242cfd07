"""Exceptions leadpages."""
from typing import Optional


class LeadPagesError(Exception):
    """Erreur de base du package."""


class ConfigurationError(LeadPagesError):
    """Document inutilisable (aucune étape, fieldName dupliqué…)."""

    def __init__(self, message: str, issues: Optional[list] = None):
        super().__init__(message)
        self.issues = issues or []
