"""
Label Presentation
==================

Single label → presentation lookup for the consoles that render decisions.

The engine never reads this table. It exists so that the HTTP layer (and
any UI consuming it) share one icon/name mapping instead of each keeping
its own copy.
"""

from typing import Dict, NamedTuple


class LabelPresentation(NamedTuple):
    """How a label is shown to the operator."""

    icon: str
    name: str


GENERIC = LabelPresentation(icon="❓", name="Detection")

LABEL_PRESENTATION: Dict[str, LabelPresentation] = {
    "fire": LabelPresentation(icon="🔥", name="Fire"),
    "chemical": LabelPresentation(icon="🧪", name="Chemical"),
    "snapshot": LabelPresentation(icon="📸", name="Snapshot"),
    "person": LabelPresentation(icon="👤", name="Person"),
    "people": LabelPresentation(icon="👥", name="People"),
    "car": LabelPresentation(icon="🚗", name="Car"),
    "truck": LabelPresentation(icon="🚚", name="Truck"),
    "animal": LabelPresentation(icon="🐾", name="Animal"),
}


def describe(label: str) -> Dict[str, str]:
    """Presentation entry for a label, generic if unknown."""
    entry = LABEL_PRESENTATION.get(label.strip().lower(), GENERIC)
    return {"icon": entry.icon, "name": entry.name}
