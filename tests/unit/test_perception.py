import pytest

from chat_autopilot.agent.perception import ErrorDetector
from chat_autopilot.rules import DEFAULT_ERROR_SCENARIOS, ErrorScenario


@pytest.mark.asyncio
async def test_finds_model_error_mid_sentence(document):
    document.add("span", document.element("Hello"))
    error = document.element(
        "Request failed: We're having trouble connecting to the model provider. This might be temporary."
    )
    document.add("span", error)

    found = await ErrorDetector(document, DEFAULT_ERROR_SCENARIOS).find_active_error()

    assert found is not None
    assert found.element is error
    assert found.scenario.name == "Model Connection Error"


@pytest.mark.asyncio
async def test_document_order_wins_over_scenario_order(document):
    network = document.element("Connection failed")
    model = document.element("We're having trouble connecting to the model provider")
    document.add("span", network, model)

    found = await ErrorDetector(document, DEFAULT_ERROR_SCENARIOS).find_active_error()

    assert found.element is network
    assert found.scenario.name == "Network Connection Error"


@pytest.mark.asyncio
async def test_scenario_order_breaks_ties_within_one_element(document):
    broad = ErrorScenario(name="Broad", error_substring="failed", recovery_button_text="Retry")
    narrow = ErrorScenario(name="Narrow", error_substring="Connection failed", recovery_button_text="Try again")
    document.add("span", document.element("Connection failed"))

    found = await ErrorDetector(document, (broad, narrow)).find_active_error()

    assert found.scenario is broad


@pytest.mark.asyncio
async def test_no_error_returns_none_and_touches_nothing(document):
    document.add("span", document.element("All good"), document.element("Accept ⏎"))

    assert await ErrorDetector(document, DEFAULT_ERROR_SCENARIOS).find_active_error() is None
    assert document.mutations == []


@pytest.mark.asyncio
async def test_custom_text_selector(document):
    document.add("p", document.element("Connection failed"))
    detector = ErrorDetector(document, DEFAULT_ERROR_SCENARIOS, text_selector="p")

    assert (await detector.find_active_error()).scenario.name == "Network Connection Error"
    assert document.queries == ["p"]
