from __future__ import annotations

import asyncio
import html
from typing import TYPE_CHECKING

from chat_autopilot.agent.views import BackupOutcome
from chat_autopilot.logging_config import LogSink, Severity

if TYPE_CHECKING:
    from chat_autopilot.config import AutopilotSettings
    from chat_autopilot.dom.views import DomDocument


class BackupPlanExecutor:
    """Last-resort remediation: type the fallback phrase into the chat input and press send."""

    def __init__(self, document: DomDocument, settings: AutopilotSettings, log: LogSink):
        self.document = document
        self.settings = settings
        self.log = log

    async def execute_backup_plan(self) -> BackupOutcome:
        self.log("Running backup plan: type and send.", Severity.WARN)
        input_box = await self.document.query_selector(self.settings.input_box_selector)
        if input_box is None:
            self.log("Backup plan failed: no editable input box found.", Severity.ERROR)
            return BackupOutcome.INPUT_MISSING

        text = self.settings.fallback_text
        self.log(f'Typing into the input box: "{text}"', Severity.INFO)
        await input_box.focus()
        await input_box.set_inner_html(f"<p>{html.escape(text)}</p>")
        # The host app's reactive bindings only pick the text up from an input event.
        await input_box.dispatch_input_event()

        await asyncio.sleep(self.settings.send_delay_seconds)

        send_icon = await self.document.query_selector(self.settings.send_icon_selector)
        if send_icon is None:
            self.log("No enabled send button found.", Severity.ERROR)
            return BackupOutcome.SEND_ICON_MISSING

        send_button = await send_icon.closest(self.settings.send_button_selector)
        if send_button is None:
            self.log("Found the send icon but not its clickable button.", Severity.ERROR)
            return BackupOutcome.SEND_BUTTON_MISSING

        self.log("Found the send button, clicking...", Severity.SUCCESS)
        await send_button.click()
        return BackupOutcome.SENT
