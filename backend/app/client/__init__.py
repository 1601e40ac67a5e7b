"""Client side of the account deletion flow.

DeletionApiClient speaks HTTP to POST /api/v1/delete-account; DeletionWizard
drives the three-phase identifier → code → done interaction on top of it.
"""

from app.client.deletion_client import DeletionApiClient, DeletionApiError
from app.client.deletion_wizard import DeletionWizard, WizardPhase

__all__ = [
    "DeletionApiClient",
    "DeletionApiError",
    "DeletionWizard",
    "WizardPhase",
]
