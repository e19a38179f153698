"""Functional tests for the console wizard and its entry point."""

from __future__ import annotations

from typing import List

import pytest

from udyamform.client import __main__ as wizard_main
from udyamform.client.api_client import SchemaLoadError, SubmitOutcome
from udyamform.client.form_controller import FormController
from udyamform.client.wizard_cli import ConsoleWizard, render_progress, resolve_choice
from udyamform.models.schema_document import SchemaDocument


def _schema() -> SchemaDocument:
    return SchemaDocument.model_validate(
        {
            "steps": [
                {
                    "title": "Contact",
                    "fields": [{"name": "mobile", "label": "Mobile", "inputType": "tel", "required": True, "pattern": r"^\d{10}$"}],
                },
                {
                    "title": "Organisation",
                    "fields": [
                        {
                            "name": "orgType",
                            "label": "Type of Organisation",
                            "kind": "select",
                            "required": True,
                            "options": [{"label": "Proprietary", "value": "1"}, {"label": "Partnership", "value": "3"}],
                        }
                    ],
                },
            ]
        }
    )


class Script:
    """Scripted prompt: returns queued answers and records the questions."""

    def __init__(self, answers: List[str]) -> None:
        self.answers = list(answers)
        self.questions: List[str] = []

    async def __call__(self, text: str) -> str:
        self.questions.append(text)
        if not self.answers:
            raise AssertionError(f"unexpected prompt: {text!r}")
        return self.answers.pop(0)


def test_resolve_choice_by_number_value_or_label():
    field = _schema().find_field("orgType")
    assert resolve_choice(field, "2") == "3"
    assert resolve_choice(field, "1") == "1"
    assert resolve_choice(field, "Partnership") == "3"
    assert resolve_choice(field, "9") is None


def test_render_progress_marks_current_and_past_steps():
    c = FormController(_schema())
    assert render_progress(c) == "Progress 50%  ● Contact  ○ Organisation"


@pytest.mark.anyio
async def test_full_run_corrects_error_and_submits():
    submitted = []

    async def submitter(record):
        submitted.append(record)
        return SubmitOutcome(ok=True, submission_id="abc", message="Submitted")

    lines: List[str] = []
    script = Script(["98765", "n", "9876543210", "n", "2", "s"])
    wizard = ConsoleWizard(FormController(_schema(), submitter=submitter), prompt=script, out=lines.append)
    outcome = await wizard.run()

    assert outcome is not None and outcome.ok
    assert submitted == [{"mobile": "9876543210", "orgType": "3"}]
    assert "    ! Mobile format is invalid." in lines
    assert "Submitted. Reference id: abc" in lines
    assert script.questions[0] == "Mobile *: "


@pytest.mark.anyio
async def test_quit_returns_none_and_unknown_option_is_reported():
    lines: List[str] = []
    script = Script(["9876543210", "n", "Sole", "q"])
    wizard = ConsoleWizard(FormController(_schema()), prompt=script, out=lines.append)
    assert await wizard.run() is None
    assert "  'Sole' is not one of the listed options." in lines


@pytest.mark.anyio
async def test_back_and_edit_keep_existing_values():
    script = Script(["9876543210", "n", "1", "b", "e", "", "q"])
    controller = FormController(_schema())
    wizard = ConsoleWizard(controller, prompt=script, out=lambda _line: None)
    await wizard.run()
    assert controller.values["mobile"] == "9876543210"
    assert controller.values["orgType"] == "1"
    assert "Mobile * [9876543210]: " in script.questions


@pytest.mark.anyio
async def test_server_rejection_is_rendered():
    async def submitter(record):
        return SubmitOutcome(ok=False, errors={"orgType": ["Type of Organisation is required."]}, message="The server rejected some fields.")

    lines: List[str] = []
    script = Script(["9876543210", "n", "1", "s", "1", "q"])
    wizard = ConsoleWizard(FormController(_schema(), submitter=submitter), prompt=script, out=lines.append)
    assert await wizard.run() is None
    assert "The server rejected some fields." in lines
    assert "  ! orgType: Type of Organisation is required." in lines


# --------------------
# Entry point
# --------------------


def test_main_reports_missing_schema(mocker, capsys):
    fetch = mocker.patch.object(
        wizard_main.FormApiClient,
        "fetch_schema",
        side_effect=SchemaLoadError("could not load schema"),
    )
    code = wizard_main.main(["--base-url", "http://api.test", "--schema-file", "missing.json"])
    assert code == wizard_main.EXIT_SCHEMA_UNAVAILABLE
    assert "could not load schema" in capsys.readouterr().err
    assert str(fetch.call_args.args[0]) == "missing.json"
