"""Functional tests for the wizard state machine.

Scope covered here:
- set_value transforms, error clearing, unknown names
- next/back navigation and progress
- submit outcomes and the terminal submitted state
- PIN auto-fill, including overlapping and stale lookups
"""

from __future__ import annotations

import asyncio
import logging

import pytest

from udyamform.client.api_client import SubmitOutcome
from udyamform.client.form_controller import FormController, WizardStateError
from udyamform.client.pin_lookup import PinLocation, PinLookupError
from udyamform.models.schema_document import SchemaDocument


def _two_step_schema() -> SchemaDocument:
    return SchemaDocument.model_validate(
        {
            "steps": [
                {
                    "title": "Contact",
                    "fields": [
                        {"name": "mobile", "label": "Mobile", "inputType": "tel", "required": True, "pattern": r"^\d{10}$", "maxLength": 10},
                        {"name": "applicantName", "label": "Applicant Name"},
                    ],
                },
                {
                    "title": "Address",
                    "fields": [
                        {"name": "pinCode", "label": "PIN Code", "required": True, "pattern": r"^\d{6}$"},
                        {"name": "district", "label": "District"},
                        {"name": "state", "label": "State"},
                        {"name": "orgType", "label": "Org Type"},
                    ],
                },
            ]
        }
    )


class RecordingSubmitter:
    def __init__(self, outcome: SubmitOutcome | None = None, exc: Exception | None = None) -> None:
        self.outcome = outcome or SubmitOutcome(ok=True, submission_id="sub-1")
        self.exc = exc
        self.calls: list[dict] = []

    async def __call__(self, record):
        self.calls.append(dict(record))
        if self.exc is not None:
            raise self.exc
        return self.outcome


def _on_last_step(controller: FormController) -> FormController:
    controller.set_value("mobile", "9876543210")
    assert controller.next() is True
    return controller


# --------------------
# Values and transforms
# --------------------


def test_initial_state():
    c = FormController(_two_step_schema())
    assert c.state.current_step_index == 0
    assert set(c.values) == {"mobile", "applicantName", "pinCode", "district", "state", "orgType"}
    assert all(v == "" for v in c.values.values())
    assert dict(c.errors) == {}
    assert c.is_first_step and not c.is_last_step


def test_set_value_applies_field_transform():
    c = FormController(_two_step_schema())
    assert c.set_value("mobile", "98765-43210") == "9876543210"
    assert c.set_value("applicantName", "ravi kumar") == "ravi kumar"
    assert c.set_value("orgType", "abc") == "ABC"
    assert c.values["orgType"] == "ABC"


def test_set_value_unknown_field_raises_key_error():
    with pytest.raises(KeyError):
        FormController(_two_step_schema()).set_value("nope", "x")


def test_views_are_read_only():
    c = FormController(_two_step_schema())
    with pytest.raises(TypeError):
        c.values["mobile"] = "1"  # type: ignore[index]


# --------------------
# Navigation
# --------------------


def test_next_blocks_on_single_required_empty_field():
    c = FormController(_two_step_schema())
    assert c.next() is False
    assert c.state.current_step_index == 0
    assert dict(c.errors) == {"mobile": "Mobile is required."}


def test_mobile_format_then_advance():
    c = FormController(_two_step_schema())
    c.set_value("mobile", "98765")
    assert c.next() is False
    assert c.errors["mobile"] == "Mobile format is invalid."
    assert c.state.current_step_index == 0

    c.set_value("mobile", "9876543210")
    assert "mobile" not in c.errors
    assert c.next() is True
    assert c.state.current_step_index == 1
    assert c.is_last_step


def test_back_is_noop_at_first_step_and_never_validates():
    c = FormController(_two_step_schema())
    assert c.back() is False
    assert c.state.current_step_index == 0
    _on_last_step(c)
    c.set_value("pinCode", "12")
    assert c.back() is True
    assert c.state.current_step_index == 0
    assert dict(c.errors) == {}


def test_next_on_last_step_validates_but_does_not_move():
    c = _on_last_step(FormController(_two_step_schema()))
    c.set_value("pinCode", "560001")
    assert c.next() is False
    assert c.state.current_step_index == 1
    assert dict(c.errors) == {}


def test_progress_percent():
    c = FormController(_two_step_schema())
    assert c.progress_percent == 50
    _on_last_step(c)
    assert c.progress_percent == 100


# --------------------
# Submit
# --------------------


@pytest.mark.anyio
async def test_submit_sends_all_values_and_locks_form():
    submitter = RecordingSubmitter()
    c = _on_last_step(FormController(_two_step_schema(), submitter=submitter))
    c.set_value("pinCode", "560001")
    outcome = await c.submit()
    assert outcome.ok and outcome.submission_id == "sub-1"
    assert submitter.calls == [dict(c.values)]
    assert c.state.submitted is True
    with pytest.raises(WizardStateError):
        await c.submit()


@pytest.mark.anyio
async def test_set_value_after_submission_changes_nothing():
    c = _on_last_step(FormController(_two_step_schema(), submitter=RecordingSubmitter()))
    c.set_value("pinCode", "560001")
    assert (await c.submit()).ok
    frozen = dict(c.values)
    assert c.set_value("mobile", "9876543211") == frozen["mobile"]
    assert c.set_value("pinCode", "110001") == "560001"
    assert dict(c.values) == frozen
    assert dict(c.errors) == {}
    with pytest.raises(KeyError):
        c.set_value("unknownField", "x")


@pytest.mark.anyio
async def test_submit_with_step_errors_does_not_call_submitter():
    submitter = RecordingSubmitter()
    c = _on_last_step(FormController(_two_step_schema(), submitter=submitter))
    outcome = await c.submit()
    assert outcome.ok is False
    assert outcome.errors == {"pinCode": ["PIN Code is required."]}
    assert submitter.calls == []
    assert c.state.submitted is False


@pytest.mark.anyio
async def test_submit_only_on_last_step():
    c = FormController(_two_step_schema(), submitter=RecordingSubmitter())
    with pytest.raises(WizardStateError):
        await c.submit()


@pytest.mark.anyio
async def test_submit_without_submitter_raises():
    c = _on_last_step(FormController(_two_step_schema()))
    with pytest.raises(WizardStateError):
        await c.submit()


@pytest.mark.anyio
async def test_submitter_exception_becomes_failed_outcome():
    c = _on_last_step(FormController(_two_step_schema(), submitter=RecordingSubmitter(exc=ConnectionError("down"))))
    c.set_value("pinCode", "560001")
    outcome = await c.submit()
    assert outcome.ok is False
    assert "down" in outcome.message
    assert c.state.submitted is False


@pytest.mark.anyio
async def test_server_field_errors_are_shown_inline():
    rejected = SubmitOutcome(ok=False, errors={"pinCode": ["PIN Code format is invalid."], "other": ["x"]})
    c = _on_last_step(FormController(_two_step_schema(), submitter=RecordingSubmitter(outcome=rejected)))
    c.set_value("pinCode", "560001")
    outcome = await c.submit()
    assert outcome is rejected
    assert dict(c.errors) == {"pinCode": "PIN Code format is invalid."}


# --------------------
# PIN auto-fill
# --------------------


def _lookup_returning(location: PinLocation, calls: list | None = None):
    async def lookup(pin: str) -> PinLocation:
        if calls is not None:
            calls.append(pin)
        return location

    return lookup


@pytest.mark.anyio
async def test_pin_lookup_fills_empty_district_and_state():
    calls: list[str] = []
    c = FormController(_two_step_schema(), pin_lookup=_lookup_returning(PinLocation("Bengaluru", "Karnataka"), calls))
    c.set_value("pinCode", "560001")
    await c.wait_for_lookups()
    assert calls == ["560001"]
    assert c.values["district"] == "Bengaluru"
    assert c.values["state"] == "Karnataka"


@pytest.mark.anyio
async def test_pin_lookup_keeps_existing_values():
    c = FormController(_two_step_schema(), pin_lookup=_lookup_returning(PinLocation("Bengaluru", "Karnataka")))
    c.set_value("district", "X")
    c.set_value("pinCode", "560001")
    await c.wait_for_lookups()
    assert c.values["district"] == "X"
    assert c.values["state"] == "Karnataka"


@pytest.mark.anyio
async def test_pin_lookup_only_for_six_digits():
    calls: list[str] = []
    c = FormController(_two_step_schema(), pin_lookup=_lookup_returning(PinLocation("D", "S"), calls))
    c.set_value("pinCode", "5600")
    c.set_value("pinCode", "5600011")
    await c.wait_for_lookups()
    assert calls == []
    assert c.values["pinCode"] == "5600011"
    assert c.values["district"] == ""


@pytest.mark.anyio
async def test_pin_lookup_failure_leaves_fields_and_logs(caplog):
    async def failing(pin: str) -> PinLocation:
        raise PinLookupError("Invalid PIN")

    c = FormController(_two_step_schema(), pin_lookup=failing)
    with caplog.at_level(logging.INFO, logger="udyamform.client.form_controller"):
        c.set_value("pinCode", "999999")
        await c.wait_for_lookups()
    assert c.values["district"] == "" and c.values["state"] == ""
    assert any("pin_lookup_ignored" in r.getMessage() for r in caplog.records)


@pytest.mark.anyio
async def test_stale_lookup_is_discarded_after_pin_edit():
    release = asyncio.Event()

    async def slow(pin: str) -> PinLocation:
        await release.wait()
        return PinLocation("Old District", "Old State")

    c = FormController(_two_step_schema(), pin_lookup=slow)
    c.set_value("pinCode", "560001")
    c.set_value("pinCode", "56000")
    release.set()
    await c.wait_for_lookups()
    assert c.values["district"] == ""
    assert c.values["state"] == ""


@pytest.mark.anyio
async def test_overlapping_lookups_apply_only_latest():
    gates = {"560001": asyncio.Event(), "110001": asyncio.Event()}
    results = {"560001": PinLocation("Bengaluru", "Karnataka"), "110001": PinLocation("New Delhi", "Delhi")}

    async def gated(pin: str) -> PinLocation:
        await gates[pin].wait()
        return results[pin]

    c = FormController(_two_step_schema(), pin_lookup=gated)
    c.set_value("pinCode", "560001")
    c.set_value("pinCode", "110001")
    # The older request resolves last; it must not win
    gates["110001"].set()
    await asyncio.sleep(0)
    gates["560001"].set()
    await c.wait_for_lookups()
    assert c.values["district"] == "New Delhi"
    assert c.values["state"] == "Delhi"


@pytest.mark.anyio
async def test_older_lookup_resolving_after_newer_failure_is_ignored():
    gate = asyncio.Event()

    async def lookup(pin: str) -> PinLocation:
        if pin == "560001":
            await gate.wait()
            return PinLocation("Bengaluru", "Karnataka")
        raise PinLookupError("Invalid PIN")

    c = FormController(_two_step_schema(), pin_lookup=lookup)
    c.set_value("pinCode", "560001")
    c.set_value("pinCode", "000000")
    gate.set()
    await c.wait_for_lookups()
    assert c.values["district"] == ""


def test_pin_watch_without_running_loop_is_skipped():
    calls: list[str] = []
    c = FormController(_two_step_schema(), pin_lookup=_lookup_returning(PinLocation("D", "S"), calls))
    c.set_value("pinCode", "560001")
    assert calls == []
    assert c.values["pinCode"] == "560001"
