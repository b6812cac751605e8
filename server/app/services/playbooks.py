"""Playbook categories, bullet parsing and bulk Markdown import."""

import enum
import re
from dataclasses import dataclass
from typing import Iterable


class PlaybookType(str, enum.Enum):
    OPENING_HOOKS = "opening_hooks"
    DISCOVERY_QUESTIONS = "discovery_questions"
    OBJECTION_RESPONSES = "objection_responses"
    CLOSING_NEXT_STEPS = "closing_next_steps"


# Free-text and legacy type names accepted from older clients
_LEGACY_TYPES = {
    "script": PlaybookType.OPENING_HOOKS,
    "opening": PlaybookType.OPENING_HOOKS,
    "framework": PlaybookType.DISCOVERY_QUESTIONS,
    "discovery": PlaybookType.DISCOVERY_QUESTIONS,
    "objection_library": PlaybookType.OBJECTION_RESPONSES,
    "objection": PlaybookType.OBJECTION_RESPONSES,
    "close": PlaybookType.CLOSING_NEXT_STEPS,
    "closing": PlaybookType.CLOSING_NEXT_STEPS,
}

_HEADING = re.compile(r"^(#{1,6})\s*(.+)$", re.MULTILINE)


@dataclass
class ParsedPlaybook:
    title: str
    content: str


def normalize_playbook_type(value: str | None) -> PlaybookType:
    """Map any incoming type string onto one of the four canonical types."""
    t = (value or "").strip().lower()
    try:
        return PlaybookType(t)
    except ValueError:
        return _LEGACY_TYPES.get(t, PlaybookType.OPENING_HOOKS)


def parse_playbook_bullets(content: str | None) -> list[str]:
    if not content or not isinstance(content, str):
        return []
    return [line.strip() for line in content.split("\n") if line.strip()]


def group_bullets_by_type(playbooks: Iterable) -> dict[str, list[str]]:
    """Collect bullets of all playbooks, keyed by canonical type.

    Accepts ORM rows or dicts with ``type`` and ``content``. All four keys
    are present in the result even when a type has no playbooks.
    """
    grouped: dict[str, list[str]] = {t.value: [] for t in PlaybookType}
    for p in playbooks:
        if isinstance(p, dict):
            p_type, content = p.get("type"), p.get("content")
        else:
            p_type, content = p.type, p.content
        grouped[normalize_playbook_type(p_type).value].extend(parse_playbook_bullets(content))
    return grouped


def parse_bulk_playbooks(text: str) -> list[ParsedPlaybook]:
    """Split pasted notes into playbooks on Markdown headings.

    Each ``#``..``######`` heading becomes a title and the text up to the
    next heading its content. Without headings the first line is the title
    and the remainder the content.
    """
    trimmed = (text or "").strip()
    if not trimmed:
        return []

    matches = list(_HEADING.finditer(trimmed))
    if not matches:
        first_line, _, rest = trimmed.partition("\n")
        return [ParsedPlaybook(title=first_line.strip() or "Imported playbook", content=rest.strip())]

    result = []
    for i, m in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(trimmed)
        title = m.group(2).strip()
        if title:
            result.append(ParsedPlaybook(title=title, content=trimmed[m.end():end].strip()))
    return result
