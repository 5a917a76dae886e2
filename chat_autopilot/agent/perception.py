from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Sequence

from chat_autopilot.agent.views import ActiveError

if TYPE_CHECKING:
    from chat_autopilot.dom.views import DomDocument
    from chat_autopilot.rules.views import ErrorScenario


class ErrorDetector:
    """Finds the first visible error banner. Read-only: never mutates the document."""

    def __init__(self, document: DomDocument, scenarios: Sequence[ErrorScenario], text_selector: str = "span"):
        self.document = document
        self.scenarios = tuple(scenarios)
        self.text_selector = text_selector

    async def find_active_error(self) -> Optional[ActiveError]:
        """Return the first (element, scenario) pair in document order, scenario order as tiebreak."""
        if not self.scenarios:
            return None
        for element in await self.document.query_selector_all(self.text_selector):
            text = await element.text_content()
            for scenario in self.scenarios:
                if scenario.is_present_in(text):
                    return ActiveError(element=element, scenario=scenario)
        return None
