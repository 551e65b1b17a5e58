"""Signaling event protocol definitions."""

from typing import Any, Dict, Optional, Tuple, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class SignalEnvelope(BaseModel):
    """Wire envelope for every websocket frame: {"event": ..., "data": ...}."""

    event: str = Field(..., min_length=1, description="Event name")
    data: Any = Field(None, description="Event payload")


class RoomEvents:
    """Membership events."""

    JOIN = "join-room"
    LEAVE = "leave-room"
    USER_JOINED = "user-joined"
    USER_LEFT = "user-left"
    ROOM_USERS = "room-users"
    READY_TO_CALL = "ready-to-call"


class RelayEvents:
    """Pass-through events forwarded to the other room members."""

    OFFER = "offer"
    ANSWER = "answer"
    ICE_CANDIDATE = "ice-candidate"
    TRANSCRIPT_UPDATE = "transcript-update"
    QUESTION_ASKED = "question-asked"
    ANSWER_SUBMITTED = "answer-submitted"
    PLAGIARISM_RESULT = "plagiarism-result"


class SystemEvents:
    """Server-originated events addressed to a single connection."""

    CONNECTED = "connected"
    ERROR = "error"


# ---------- inbound payloads ---------- #


class RoomPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    room_id: str = Field(..., alias="roomId", min_length=1)


class OfferPayload(RoomPayload):
    offer: Any


class AnswerPayload(RoomPayload):
    answer: Any


class IceCandidatePayload(RoomPayload):
    candidate: Any


class TranscriptUpdatePayload(RoomPayload):
    transcript: Any
    timestamp: Any


class QuestionAskedPayload(RoomPayload):
    question: Any


class AnswerSubmittedPayload(RoomPayload):
    question_id: Any = Field(..., alias="questionId")
    transcript: Any


class PlagiarismResultPayload(RoomPayload):
    question_id: Any = Field(..., alias="questionId")
    score: Any
    interpretation: Any


# event name -> (payload model, fields forwarded as (attribute, wire name))
RELAY_EVENTS: Dict[str, Tuple[Type[RoomPayload], Tuple[Tuple[str, str], ...]]] = {
    RelayEvents.OFFER: (OfferPayload, (("offer", "offer"),)),
    RelayEvents.ANSWER: (AnswerPayload, (("answer", "answer"),)),
    RelayEvents.ICE_CANDIDATE: (IceCandidatePayload, (("candidate", "candidate"),)),
    RelayEvents.TRANSCRIPT_UPDATE: (
        TranscriptUpdatePayload,
        (("transcript", "transcript"), ("timestamp", "timestamp")),
    ),
    RelayEvents.QUESTION_ASKED: (QuestionAskedPayload, (("question", "question"),)),
    RelayEvents.ANSWER_SUBMITTED: (
        AnswerSubmittedPayload,
        (("question_id", "questionId"), ("transcript", "transcript")),
    ),
    RelayEvents.PLAGIARISM_RESULT: (
        PlagiarismResultPayload,
        (("question_id", "questionId"), ("score", "score"), ("interpretation", "interpretation")),
    ),
}

INBOUND_EVENTS = frozenset({RoomEvents.JOIN, RoomEvents.LEAVE, *RELAY_EVENTS})


class PayloadError(ValueError):
    """Raised when an inbound payload is missing required fields."""

    def __init__(self, event: str, message: str):
        super().__init__(message)
        self.event = event


def parse_room_id(event: str, data: Any) -> str:
    """Accept a bare room id string or an object carrying roomId."""
    if isinstance(data, str):
        data = {"roomId": data}
    try:
        return RoomPayload.model_validate(data).room_id
    except ValidationError as e:
        raise PayloadError(event, f"Invalid payload for {event}: roomId is required") from e


def parse_relay(event: str, data: Any) -> Tuple[str, Dict[str, Any]]:
    """Validate a relay payload; return its room id and the outbound fields."""
    model, fields = RELAY_EVENTS[event]
    try:
        payload = model.model_validate(data)
    except ValidationError as e:
        missing = ", ".join(
            str(err["loc"][0]) for err in e.errors() if err.get("loc")
        )
        raise PayloadError(event, f"Invalid payload for {event}: {missing or 'malformed'}") from e
    return payload.room_id, {wire: getattr(payload, attr) for attr, wire in fields}


def create_event(event_type: str, data: Any = None) -> Dict[str, Any]:
    """Create a wire event."""
    return {"event": event_type, "data": data}


def create_error(message: str, event: Optional[str] = None) -> Dict[str, Any]:
    return create_event(SystemEvents.ERROR, {"message": message, "event": event})
