"""Wizard state machine for the multi-step registration form.

The controller owns the form state (current step, values, per-field errors)
and is the only thing that mutates it. Rendering is left to callers such as
the console wizard.

States are the step indexes plus a terminal "submitted" state:
- `set_value` applies the field's input transform and clears its error
- `next` validates the current step and advances when it is clean
- `back` steps back without validating
- `submit` validates the last step and hands all values to the submitter

Typing a 6-digit `pinCode` schedules a PIN lookup on the running event loop.
District and state are filled only while they are empty, and only the most
recent lookup for the PIN still in the field is applied.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Awaitable, Callable, Dict, Mapping, Optional, Set

from udyamform.client.api_client import SubmitOutcome
from udyamform.client.pin_lookup import PinLocation
from udyamform.logic.transform_engine import apply_transform
from udyamform.logic.validation import validate_fields
from udyamform.models.schema_document import FieldDescriptor, SchemaDocument, Step

logger = logging.getLogger(__name__)

PIN_FIELD = "pinCode"
PIN_LENGTH = 6
AUTOFILL_FIELDS = ("district", "state")

Submitter = Callable[[Dict[str, str]], Awaitable[SubmitOutcome]]
PinLookup = Callable[[str], Awaitable[PinLocation]]


class WizardStateError(RuntimeError):
    """Raised for operations that are not valid in the current wizard state."""


@dataclass
class FormState:
    current_step_index: int = 0
    values: Dict[str, str] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)
    submitted: bool = False


class FormController:
    def __init__(
        self,
        schema: SchemaDocument,
        *,
        submitter: Optional[Submitter] = None,
        pin_lookup: Optional[PinLookup] = None,
    ) -> None:
        self.schema = schema
        self._submitter = submitter
        self._pin_lookup = pin_lookup
        self._fields: Dict[str, FieldDescriptor] = {f.name: f for f in schema.iter_fields()}
        self.state = FormState(values={name: "" for name in self._fields})
        self._lookup_seq = 0
        self._pending: Set[asyncio.Task] = set()

    # -- read-only views -------------------------------------------------

    @property
    def steps(self) -> tuple[Step, ...]:
        return self.schema.steps

    @property
    def current_step(self) -> Step:
        return self.schema.steps[self.state.current_step_index]

    @property
    def is_first_step(self) -> bool:
        return self.state.current_step_index == 0

    @property
    def is_last_step(self) -> bool:
        return self.state.current_step_index == len(self.schema.steps) - 1

    @property
    def progress_percent(self) -> int:
        return round((self.state.current_step_index + 1) / len(self.schema.steps) * 100)

    @property
    def values(self) -> Mapping[str, str]:
        return MappingProxyType(self.state.values)

    @property
    def errors(self) -> Mapping[str, str]:
        return MappingProxyType(self.state.errors)

    def descriptor(self, name: str) -> FieldDescriptor:
        return self._fields[name]

    # -- transitions -----------------------------------------------------

    def set_value(self, name: str, raw: str) -> str:
        """Store the transformed input for `name` and return the stored value.

        After a successful submission the values are frozen: the call stores
        nothing and returns the value already held.
        """
        descriptor = self._fields[name]
        if self.state.submitted:
            return self.state.values.get(name, "")
        value = apply_transform(descriptor.transform, raw)
        previous = self.state.values.get(name, "")
        self.state.values[name] = value
        self.state.errors.pop(name, None)
        if name == PIN_FIELD and value != previous:
            self._watch_pin(value)
        return value

    def validate_current_step(self) -> Dict[str, str]:
        return validate_fields(self.state.values, self.current_step.fields)

    def next(self) -> bool:
        """Validate the current step; advance when clean. Return True if moved."""
        errors = self.validate_current_step()
        self.state.errors = errors
        if errors:
            logger.info("wizard_step_blocked step=%d fields=%s", self.state.current_step_index, sorted(errors))
            return False
        if self.is_last_step:
            return False
        self.state.current_step_index += 1
        return True

    def back(self) -> bool:
        if self.state.current_step_index == 0:
            return False
        self.state.current_step_index -= 1
        return True

    async def submit(self) -> SubmitOutcome:
        if self.state.submitted:
            raise WizardStateError("form already submitted")
        if not self.is_last_step:
            raise WizardStateError("submit is only available on the last step")
        if self._submitter is None:
            raise WizardStateError("no submitter configured")
        errors = self.validate_current_step()
        self.state.errors = errors
        if errors:
            return SubmitOutcome(
                ok=False,
                errors={k: [v] for k, v in errors.items()},
                message="Please correct the highlighted fields.",
            )
        try:
            outcome = await self._submitter(dict(self.state.values))
        except Exception as exc:
            logger.warning("submit_failed error=%s", exc, exc_info=True)
            return SubmitOutcome(ok=False, message=f"Submission failed: {exc}")
        if outcome.ok:
            self.state.submitted = True
        elif outcome.errors:
            self.state.errors = {k: v[0] for k, v in outcome.errors.items() if k in self._fields and v}
        return outcome

    # -- PIN auto-fill ---------------------------------------------------

    def _watch_pin(self, pin: str) -> None:
        # Any edit invalidates lookups already in flight
        self._lookup_seq += 1
        lookup = self._pin_lookup
        if lookup is None or len(pin) != PIN_LENGTH:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("pin_lookup_skipped_no_loop pin=%s", pin)
            return
        task = loop.create_task(self._lookup_and_fill(lookup, pin, self._lookup_seq))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _lookup_and_fill(self, lookup: PinLookup, pin: str, seq: int) -> None:
        try:
            location = await lookup(pin)
        except Exception as exc:
            logger.info("pin_lookup_ignored pin=%s error=%s", pin, exc)
            return
        if seq != self._lookup_seq or self.state.values.get(PIN_FIELD) != pin:
            logger.debug("pin_lookup_stale pin=%s", pin)
            return
        found = {"district": location.district, "state": location.state}
        for name in AUTOFILL_FIELDS:
            if name in self.state.values and not self.state.values[name] and found[name]:
                self.state.values[name] = found[name]
                self.state.errors.pop(name, None)

    async def wait_for_lookups(self) -> None:
        """Wait for every scheduled PIN lookup to settle."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


__all__ = [
    "AUTOFILL_FIELDS",
    "FormController",
    "FormState",
    "PIN_FIELD",
    "WizardStateError",
]
