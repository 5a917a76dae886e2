from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from chat_autopilot.logging_config import LogSink, Severity
from chat_autopilot.rules.views import trim_text

if TYPE_CHECKING:
    from chat_autopilot.dom.views import DomDocument
    from chat_autopilot.rules.views import ProactiveActionRule


class ProactiveActionHandler:
    """
    Clicks the first element matching any proactive rule.

    Rules are tried in priority order and elements in document order; at most one
    click happens per call, across all rules.
    """

    def __init__(
        self,
        document: DomDocument,
        rules: Sequence[ProactiveActionRule],
        log: LogSink,
        clickable_selector: str = 'div, a, span[role="link"], [data-link]',
        log_empty_queries: bool = False,
    ):
        self.document = document
        self.rules = tuple(rules)
        self.log = log
        self.clickable_selector = clickable_selector
        self.log_empty_queries = log_empty_queries

    async def try_proactive_action(self) -> bool:
        for rule in self.rules:
            elements = await self.document.query_selector_all(rule.target_selector)
            if not elements:
                # Fast polling would flood the log with these.
                if self.log_empty_queries:
                    self.log(f'No candidates for "{rule.name}" ({rule.target_selector})', Severity.DEBUG)
                continue

            for element in elements:
                text = trim_text(await element.text_content())
                if not rule.matches(text):
                    continue

                clickable = await element.closest(self.clickable_selector) or element
                if await clickable.is_clickable():
                    self.log(f'Found proactive action "{rule.name}" (text: "{text}"), clicking', Severity.SUCCESS)
                    await clickable.click()
                    return True
        return False
