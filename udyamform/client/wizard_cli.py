"""Console renderer for the registration wizard.

Shows one step at a time with a progress line, prompts for each field
(required fields are starred, select fields list numbered options) and
offers next/back/edit/submit actions. All state changes go through the
FormController; this module only reads and renders it.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Iterable, Optional

from udyamform.client.api_client import SubmitOutcome
from udyamform.client.form_controller import FormController
from udyamform.models.schema_document import FieldDescriptor

logger = logging.getLogger(__name__)

Prompt = Callable[[str], Awaitable[str]]
Output = Callable[[str], None]


async def _stdin_prompt(text: str) -> str:
    # input() runs off the event loop so PIN lookups keep resolving
    return await asyncio.to_thread(input, text)


def render_progress(controller: FormController) -> str:
    marks = []
    for i, step in enumerate(controller.steps):
        dot = "●" if i <= controller.state.current_step_index else "○"
        marks.append(f"{dot} {step.title}")
    return f"Progress {controller.progress_percent}%  " + "  ".join(marks)


def render_field_label(f: FieldDescriptor) -> str:
    return f"{f.label}{' *' if f.required else ''}"


def resolve_choice(f: FieldDescriptor, answer: str) -> Optional[str]:
    """Map a typed answer onto a select option value (number, value or label)."""
    text = answer.strip()
    if text.isdigit() and 1 <= int(text) <= len(f.options):
        return f.options[int(text) - 1].value
    for opt in f.options:
        if text in (opt.value, opt.label):
            return opt.value
    return None


class ConsoleWizard:
    def __init__(
        self,
        controller: FormController,
        *,
        prompt: Optional[Prompt] = None,
        out: Optional[Output] = None,
    ) -> None:
        self.controller = controller
        self.prompt = prompt or _stdin_prompt
        self.out = out or print

    async def _ask(self, f: FieldDescriptor) -> None:
        current = self.controller.values.get(f.name, "")
        if f.is_select:
            for i, opt in enumerate(f.options, start=1):
                self.out(f"  {i}) {opt.label}")
        hint = f" [{current}]" if current else (f" ({f.placeholder})" if f.placeholder else "")
        answer = await self.prompt(f"{render_field_label(f)}{hint}: ")
        if not answer.strip():
            return
        if f.is_select:
            choice = resolve_choice(f, answer)
            if choice is None:
                self.out(f"  '{answer.strip()}' is not one of the listed options.")
                return
            answer = choice
        self.controller.set_value(f.name, answer)

    async def fill(self, fields: Iterable[FieldDescriptor]) -> None:
        for f in fields:
            await self._ask(f)

    def render_step(self) -> None:
        step = self.controller.current_step
        self.out(render_progress(self.controller))
        self.out(f"== {step.title} ==")
        for f in step.fields:
            value = self.controller.values.get(f.name, "")
            self.out(f"  {render_field_label(f)}: {value}")
            err = self.controller.errors.get(f.name)
            if err:
                self.out(f"    ! {err}")

    def _render_outcome(self, outcome: SubmitOutcome) -> None:
        if outcome.ok:
            self.out(f"Submitted. Reference id: {outcome.submission_id}")
            return
        self.out(outcome.message or "Submission failed.")
        for name, messages in outcome.errors.items():
            for message in messages:
                self.out(f"  ! {name}: {message}")

    async def run(self) -> Optional[SubmitOutcome]:
        """Drive the wizard until submission succeeds or the user quits."""
        await self.fill(self.controller.current_step.fields)
        while True:
            self.render_step()
            last = self.controller.is_last_step
            actions = "[s]ubmit" if last else "[n]ext"
            back = "" if self.controller.is_first_step else " / [b]ack"
            choice = (await self.prompt(f"{actions}{back} / [e]dit / [q]uit: ")).strip().lower()
            if choice == "q":
                logger.info("wizard_quit step=%d", self.controller.state.current_step_index + 1)
                return None
            if choice == "e":
                await self.fill(self.controller.current_step.fields)
            elif choice == "b" and not self.controller.is_first_step:
                self.controller.back()
            elif choice == "n" and not last:
                if self.controller.next():
                    await self.fill(self.controller.current_step.fields)
                else:
                    await self._fill_errors()
            elif choice == "s" and last:
                outcome = await self.controller.submit()
                self._render_outcome(outcome)
                if outcome.ok:
                    return outcome
                await self._fill_errors()

    async def _fill_errors(self) -> None:
        step_fields = [f for f in self.controller.current_step.fields if f.name in self.controller.errors]
        if step_fields:
            self.render_step()
            await self.fill(step_fields)


__all__ = ["ConsoleWizard", "render_progress", "resolve_choice"]
