from app.models.base import Base
from app.models.practice_session import PracticeSession
from app.models.message import Message
from app.models.feedback import Feedback
from app.models.note_chunk import NoteChunk
from app.models.playbook import Playbook
from app.models.scenario import ScenarioPreset

__all__ = [
    "Base",
    "PracticeSession",
    "Message",
    "Feedback",
    "NoteChunk",
    "Playbook",
    "ScenarioPreset",
]
