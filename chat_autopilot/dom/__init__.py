from chat_autopilot.dom.service import PlaywrightDomDocument, PlaywrightDomElement
from chat_autopilot.dom.views import DomDocument, DomElement

__all__ = ['DomDocument', 'DomElement', 'PlaywrightDomDocument', 'PlaywrightDomElement']
