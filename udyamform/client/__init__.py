"""Wizard client: form state machine, API and PIN lookup collaborators."""

from udyamform.client.api_client import FormApiClient, SchemaLoadError, SubmitOutcome
from udyamform.client.form_controller import FormController, FormState, WizardStateError
from udyamform.client.pin_lookup import PinLocation, PinLookupClient, PinLookupError

__all__ = [
    "FormApiClient",
    "FormController",
    "FormState",
    "PinLocation",
    "PinLookupClient",
    "PinLookupError",
    "SchemaLoadError",
    "SubmitOutcome",
    "WizardStateError",
]
