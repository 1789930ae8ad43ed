"""Fill empty JSON placeholder elements with local payload text."""

from __future__ import annotations

import logging
from typing import Mapping

logger = logging.getLogger("inline_pack")

JSON_SCRIPT_OPEN = '<script id="{element_id}" type="application/json">'
SCRIPT_CLOSE = "</script>"


class MissingPlaceholderError(RuntimeError):
    """The empty placeholder for a required payload is not in the document."""

    def __init__(self, element_id: str) -> None:
        self.element_id = element_id
        super().__init__(
            f"Placeholder {placeholder(element_id)} not found; "
            "the document is missing it or was already injected"
        )


def placeholder(element_id: str) -> str:
    return JSON_SCRIPT_OPEN.format(element_id=element_id) + SCRIPT_CLOSE


def inject_payload(html: str, element_id: str, payload: str) -> str:
    """Put ``payload`` verbatim inside the empty placeholder for ``element_id``."""
    empty = placeholder(element_id)
    if empty not in html:
        raise MissingPlaceholderError(element_id)
    filled = f"{JSON_SCRIPT_OPEN.format(element_id=element_id)}\n{payload}\n{SCRIPT_CLOSE}"
    logger.debug("Injecting %d chars into #%s", len(payload), element_id)
    return html.replace(empty, filled, 1)


def inject_payloads(html: str, payloads: Mapping[str, str]) -> str:
    """Inject every payload; all placeholders must exist before any is filled."""
    for element_id in payloads:
        if placeholder(element_id) not in html:
            raise MissingPlaceholderError(element_id)
    for element_id, payload in payloads.items():
        html = inject_payload(html, element_id, payload)
    return html
