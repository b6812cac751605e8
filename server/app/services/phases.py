"""Sales conversation phases shared by the evaluator and the roleplay coach."""

import enum


class Phase(str, enum.Enum):
    OPENING = "opening"
    DISCOVERY = "discovery"
    PITCH = "pitch"
    OBJECTION = "objection"
    CLOSE = "close"


# Order matters: feedback lists phases in this order.
PHASE_ORDER: tuple[str, ...] = tuple(p.value for p in Phase)
