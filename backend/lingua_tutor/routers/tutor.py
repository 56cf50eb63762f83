from __future__ import annotations

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ..credentials import resolve_api_key
from ..curriculum import CURRICULUM, LEVELS, format_topic_name, topic_status
from ..engine import Message, TopicUnavailableError, TurnResult, TutorSession
from ..llm_client import TutorClient
from ..progress import ProgressState
from ..store import KeyValueStore, load_progress, reset_progress, save_progress
from .config import get_store


router = APIRouter(prefix="/tutor", tags=["tutor"])


class StartRequest(BaseModel):
    language: str = Field(default="el", description="Language id, e.g. el, es, fr")


class AnswerRequest(BaseModel):
    session_id: str
    option: str


class MessageRequest(BaseModel):
    session_id: str
    text: str


class TopicRequest(BaseModel):
    session_id: str
    level: str
    topic: str


class TurnResponse(BaseModel):
    session_id: str
    language: str
    messages: List[Message]
    options: List[str]
    progress: ProgressState
    correct: Optional[bool] = None
    correct_option: Optional[str] = None


class TranscriptResponse(BaseModel):
    session_id: str
    language: str
    messages: List[Message]
    options: List[str]


class TopicInfo(BaseModel):
    id: str
    name: str
    status: str


class LevelInfo(BaseModel):
    level: str
    required_to_advance: int
    topics: List[TopicInfo]


class CurriculumResponse(BaseModel):
    progress: ProgressState
    levels: List[LevelInfo]


_sessions: Dict[str, TutorSession] = {}


def _get_session(session_id: str) -> TutorSession:
    session = _sessions.get(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found or expired")
    return session


def _tutor_for(store: KeyValueStore) -> Optional[TutorClient]:
    api_key = resolve_api_key(store)
    if not api_key:
        return None
    return TutorClient(api_key=api_key)


def _respond(session: TutorSession, result: TurnResult) -> TurnResponse:
    return TurnResponse(
        session_id=session.session_id,
        language=session.language,
        messages=result.messages,
        options=result.practice.options,
        progress=result.state,
        correct=result.correct,
        correct_option=result.expected,
    )


async def _run(session: TutorSession, store: KeyValueStore, action, *args) -> TurnResponse:
    # The stored state is authoritative; inject it, run the action, write it back
    async with session.lock:
        session.state = load_progress(store)
        tutor = _tutor_for(store)
        try:
            result = await action(*args, tutor)
        finally:
            if tutor is not None:
                await tutor.aclose()
        save_progress(store, session.state)
    return _respond(session, result)


@router.get("/curriculum", response_model=CurriculumResponse)
def curriculum(store: KeyValueStore = Depends(get_store)):
    state = load_progress(store)
    levels = [
        LevelInfo(
            level=level,
            required_to_advance=CURRICULUM[level].required_to_advance,
            topics=[
                TopicInfo(
                    id=t,
                    name=format_topic_name(t),
                    status=topic_status(state.level, state.topic, state.completed, level, t),
                )
                for t in CURRICULUM[level].topics
            ],
        )
        for level in LEVELS
    ]
    return CurriculumResponse(progress=state, levels=levels)


@router.get("/progress", response_model=ProgressState)
def get_progress(store: KeyValueStore = Depends(get_store)):
    return load_progress(store)


@router.delete("/progress", response_model=ProgressState)
def delete_progress(store: KeyValueStore = Depends(get_store)):
    return reset_progress(store)


@router.post("/start", response_model=TurnResponse)
async def start(req: StartRequest, store: KeyValueStore = Depends(get_store)):
    language = (req.language or "").strip().lower()
    if not language:
        raise HTTPException(status_code=400, detail="language is required")
    session = TutorSession(language, load_progress(store))
    _sessions[session.session_id] = session
    return await _run(session, store, session.start)


@router.post("/answer", response_model=TurnResponse)
async def answer(req: AnswerRequest, store: KeyValueStore = Depends(get_store)):
    session = _get_session(req.session_id)
    if not req.option.strip():
        raise HTTPException(status_code=400, detail="option is required")
    return await _run(session, store, session.choose, req.option)


@router.post("/message", response_model=TurnResponse)
async def message(req: MessageRequest, store: KeyValueStore = Depends(get_store)):
    session = _get_session(req.session_id)
    text = req.text.strip()
    if not text:
        raise HTTPException(status_code=400, detail="text is required")
    return await _run(session, store, session.send, text)


@router.post("/topic", response_model=TurnResponse)
async def topic(req: TopicRequest, store: KeyValueStore = Depends(get_store)):
    session = _get_session(req.session_id)
    try:
        return await _run(session, store, session.select_topic, req.level, req.topic)
    except TopicUnavailableError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.get("/session/{session_id}", response_model=TranscriptResponse)
def transcript(session_id: str):
    session = _get_session(session_id)
    return TranscriptResponse(
        session_id=session.session_id,
        language=session.language,
        messages=session.messages,
        options=session.practice.options,
    )
