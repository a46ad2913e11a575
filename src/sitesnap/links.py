"""Anchor extraction from the rendered page."""

from typing import Any, Iterable, List

from sitesnap.models import Anchor

# Runs in the page for every a[href]. ``a.href`` is already resolved against
# the document base; ``innerText`` only contains rendered text, so content
# hidden with CSS never ends up in the run log.
ANCHOR_EXTRACTION_SCRIPT = """
elements => elements.map(a => ({
    href: a.href,
    text: a.innerText || '',
}))
"""


def anchors_from_elements(elements: Iterable[Any]) -> List[Anchor]:
    """Convert the browser's anchor records into Anchors.

    Records without a usable string href are dropped. Text is returned raw;
    callers clean it.

    Args:
        elements: Result of ANCHOR_EXTRACTION_SCRIPT (list of dicts)

    Returns:
        List of anchors in document order
    """
    anchors = []
    for element in elements or []:
        if not isinstance(element, dict):
            continue
        href = element.get("href")
        if not isinstance(href, str) or not href.strip():
            continue
        text = element.get("text")
        anchors.append(Anchor(href=href.strip(), text=text if isinstance(text, str) else ""))
    return anchors
