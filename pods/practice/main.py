"""Practice Pod: FastAPI service for piano-practice melodies.

Generates scale or chord-constrained melodies, lays them out as notation
tokens, captions them with solfège, schedules and synthesizes playback and
keeps the state of a single local practice widget.
"""

from __future__ import annotations

import logging
import random
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field, field_validator

from mncore.audio import wav_to_base64
from mncore.config import get_settings
from mncore.logging import setup_logging, setup_tracing
from mnmelody.generator import GeneratedMelody, NoteEvent, get_strategy
from mnmelody.pitch import parse_pitch
from mnmelody.rhythm import Duration
from mnmelody.scales import PROGRESSION_LIBRARY
from mnscore.layout import layout
from mnscore.playback import dispatch, playback_length, schedule
from mnscore.render import VexflowHtmlRenderer, render_score
from mnscore.solfege import solfege_captions

from .config import config
from .session import NothingToReplayError, PracticeSession, SessionBusyError
from .synth import BufferPlayer, PianoSynth, to_wav_bytes

logger = logging.getLogger(__name__)

SERVICE_NAME = config.SERVICE_NAME
SERVICE_VERSION = config.SERVICE_VERSION


class NoteModel(BaseModel):
    """Single melody event."""

    pitch: str = Field(..., description="Scientific pitch, e.g. C4, F#5, Bb3")
    duration: Duration

    @field_validator("pitch")
    @classmethod
    def validate_pitch(cls, value: str) -> str:
        return str(parse_pitch(value))


class MelodyModel(BaseModel):
    """A generated melody."""

    events: List[NoteModel]
    label: str = ""
    mode: str = "scale"
    measure_count: int = Field(default=4, ge=1, le=16)
    harmony: List[List[str]] = Field(default_factory=list)
    total_beats: float = 0.0


class GenerateRequest(BaseModel):
    """Request payload for melody generation."""

    mode: str = Field(default="scale", description="'scale' or 'chord'")
    measure_count: Optional[int] = Field(
        default=None, ge=1, le=16, description="2 or 4 for scale melodies, 1-16 for chord melodies"
    )
    key_root: Optional[str] = Field(default=None, description="Chord melody key, e.g. D, Bb")
    key_mode: str = Field(default="major", description="Progression library: major or minor")
    seed: Optional[int] = Field(default=None, ge=0, le=config.MAX_SEED)

    @field_validator("mode")
    @classmethod
    def validate_mode(cls, value: str) -> str:
        if value not in ("scale", "chord"):
            raise ValueError("mode must be 'scale' or 'chord'")
        return value

    @field_validator("key_mode")
    @classmethod
    def validate_key_mode(cls, value: str) -> str:
        if value not in PROGRESSION_LIBRARY:
            raise ValueError(f"Unknown key mode: {value}")
        return value


class MelodyRequest(BaseModel):
    """A melody plus rendering options."""

    melody: MelodyModel
    measure_count: Optional[int] = Field(default=None, ge=1, le=16)
    bpm: Optional[int] = Field(default=None, ge=20, le=300)
    title: str = ""


class LayoutResponse(BaseModel):
    tokens: List[str]
    width: int
    height: int
    clef: str
    time_signature: str


class CaptionModel(BaseModel):
    syllable: Optional[str]
    duration: Duration


class ScheduledNoteModel(BaseModel):
    pitch: str
    start: float
    release: float


class ScheduleResponse(BaseModel):
    notes: List[ScheduledNoteModel]
    length: float
    bpm: int


class AudioResponse(BaseModel):
    audio_b64: str
    sample_rate: int
    duration: float


class ToggleRequest(BaseModel):
    name: str = Field(..., description="'measures', 'score' or 'solfege'")


class RegenerateRequest(BaseModel):
    mode: str = "scale"
    key_root: Optional[str] = None
    key_mode: str = "major"
    seed: Optional[int] = Field(default=None, ge=0, le=config.MAX_SEED)
    synthesize: bool = Field(default=False, description="Include rendered audio")


class ReplayRequest(BaseModel):
    synthesize: bool = False


class PressRequest(BaseModel):
    pitch: str
    duration: Duration = Duration.QUARTER


class SessionResponse(BaseModel):
    measure_count: int
    show_score: bool
    show_solfege: bool
    busy: bool
    can_replay: bool
    label: Optional[str] = None
    melody: Optional[MelodyModel] = None
    layout: Optional[LayoutResponse] = None
    captions: Optional[List[CaptionModel]] = None
    audio: Optional[AudioResponse] = None


def melody_to_model(melody: GeneratedMelody) -> MelodyModel:
    return MelodyModel(
        events=[NoteModel(pitch=str(e.pitch), duration=e.duration) for e in melody.events],
        label=melody.label,
        mode=melody.mode,
        measure_count=melody.measure_count,
        harmony=[[str(p) for p in chord] for chord in melody.harmony],
        total_beats=melody.total_beats,
    )


def model_to_melody(model: MelodyModel) -> GeneratedMelody:
    return GeneratedMelody(
        events=tuple(NoteEvent(parse_pitch(n.pitch), n.duration) for n in model.events),
        label=model.label,
        mode=model.mode,
        measure_count=model.measure_count,
    )


def layout_response(melody: GeneratedMelody, measure_count: int) -> LayoutResponse:
    score = layout(melody, measure_count)
    return LayoutResponse(
        tokens=list(score.tokens),
        width=score.canvas.width,
        height=score.canvas.height,
        clef=score.clef,
        time_signature=score.time_signature,
    )


def captions_response(melody: GeneratedMelody) -> List[CaptionModel]:
    return [CaptionModel(syllable=c.syllable, duration=c.duration) for c in solfege_captions(melody)]


def synthesize_audio(melody: GeneratedMelody, bpm: int) -> AudioResponse:
    sample_rate = get_settings().MN_SAMPLE_RATE
    player = BufferPlayer(PianoSynth(sample_rate=sample_rate))
    dispatch(melody, player, bpm)
    audio = player.render()
    return AudioResponse(
        audio_b64=wav_to_base64(to_wav_bytes(audio, sample_rate)),
        sample_rate=sample_rate,
        duration=len(audio) / sample_rate,
    )


_session: Optional[PracticeSession] = None


def get_session() -> PracticeSession:
    """The single local practice session."""
    global _session
    if _session is None:
        s = get_settings()
        _session = PracticeSession(measure_count=s.MN_DEFAULT_MEASURES, bpm=s.MN_TEMPO_BPM)
    return _session


def session_response(session: PracticeSession, **extra) -> SessionResponse:
    return SessionResponse(**session.snapshot(), **extra)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown hooks for logging/tracing."""
    try:
        setup_logging()
    except Exception as exc:  # pragma: no cover - logging fallback
        logging.basicConfig(level=logging.INFO)
        logger.warning(f"Logging fallback (invalid env?): {exc}")

    try:
        setup_tracing(service_name=f"{SERVICE_NAME}-pod")
    except Exception as exc:  # pragma: no cover - optional tracing
        logger.info(f"Tracing not configured: {exc}")
    logger.info(f"{SERVICE_NAME} pod starting (v{SERVICE_VERSION})...")
    yield
    logger.info(f"{SERVICE_NAME} pod shutting down...")


app = FastAPI(
    title="Practice Pod",
    description="Piano-practice melody generation and notation layout",
    version=SERVICE_VERSION,
    lifespan=lifespan,
)


@app.get("/")
async def root():
    """API info endpoint."""
    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "description": "Practice melodies, notation tokens, solfège and playback",
        "endpoints": {
            "GET /": "This info",
            "POST /health": "Health check",
            "POST /generate": "Generate a scale or chord melody",
            "POST /layout": "Notation tokens for a melody",
            "POST /solfege": "Solfège captions for a melody",
            "POST /schedule": "Playback offsets for a melody",
            "POST /synthesize": "Render a melody to WAV (base64)",
            "POST /score": "Render a melody as a VexFlow HTML page",
            "GET /session": "Practice session state",
            "POST /session/toggle": "Flip measures/score/solfege",
            "POST /session/regenerate": "Generate and play a new melody",
            "POST /session/replay": "Play the last melody again",
            "POST /session/press": "Sound a single key",
        },
    }


@app.post("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok", "service": SERVICE_NAME, "version": SERVICE_VERSION}


@app.post("/generate", response_model=MelodyModel)
async def generate(request: GenerateRequest):
    """Generate a melody with an optional deterministic seed."""
    try:
        strategy = get_strategy(
            request.mode,
            progression_library=PROGRESSION_LIBRARY[request.key_mode],
            current_key_root=request.key_root,
        )
        if request.measure_count is not None:
            measure_count = request.measure_count
        elif request.mode == "chord":
            measure_count = 1
        else:
            measure_count = get_settings().MN_DEFAULT_MEASURES

        melody = strategy.generate(measure_count, random.Random(request.seed))
        return melody_to_model(melody)

    except ValueError as exc:
        logger.error(f"Validation error: {exc}")
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:  # pragma: no cover - unexpected errors
        logger.error(f"Generation error: {exc}")
        raise HTTPException(status_code=500, detail="Melody generation failed") from exc


@app.post("/layout", response_model=LayoutResponse)
async def layout_endpoint(request: MelodyRequest):
    """Lay out a melody as per-measure EasyScore tokens."""
    try:
        melody = model_to_melody(request.melody)
        return layout_response(melody, request.measure_count or melody.measure_count)
    except ValueError as exc:
        logger.error(f"Validation error: {exc}")
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:  # pragma: no cover - unexpected errors
        logger.error(f"Layout error: {exc}")
        raise HTTPException(status_code=500, detail="Layout failed") from exc


@app.post("/solfege", response_model=List[CaptionModel])
async def solfege(request: MelodyRequest):
    """Solfège caption per event."""
    try:
        return captions_response(model_to_melody(request.melody))
    except ValueError as exc:
        logger.error(f"Validation error: {exc}")
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@app.post("/schedule", response_model=ScheduleResponse)
async def schedule_endpoint(request: MelodyRequest):
    """Start/release offsets at the fixed tempo."""
    try:
        melody = model_to_melody(request.melody)
        bpm = request.bpm or get_settings().MN_TEMPO_BPM
        notes = [
            ScheduledNoteModel(pitch=str(n.pitch), start=n.start, release=n.release)
            for n in schedule(melody, bpm)
        ]
        return ScheduleResponse(notes=notes, length=playback_length(melody, bpm), bpm=bpm)
    except ValueError as exc:
        logger.error(f"Validation error: {exc}")
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@app.post("/synthesize", response_model=AudioResponse)
async def synthesize(request: MelodyRequest):
    """Render a melody with the piano tone to base64 WAV."""
    try:
        melody = model_to_melody(request.melody)
        return synthesize_audio(melody, request.bpm or get_settings().MN_TEMPO_BPM)
    except ValueError as exc:
        logger.error(f"Validation error: {exc}")
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:  # pragma: no cover - unexpected errors
        logger.error(f"Synthesis error: {exc}")
        raise HTTPException(status_code=500, detail="Synthesis failed") from exc


@app.post("/score", response_class=HTMLResponse)
async def score(request: MelodyRequest):
    """Render a melody as a standalone VexFlow page."""
    try:
        melody = model_to_melody(request.melody)
        score_layout = layout(melody, request.measure_count or melody.measure_count)
        title = request.title or melody.label
        return HTMLResponse(render_score(score_layout, VexflowHtmlRenderer(), title))
    except ValueError as exc:
        logger.error(f"Validation error: {exc}")
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@app.get("/session", response_model=SessionResponse)
async def session_state(session: PracticeSession = Depends(get_session)):
    """Current practice session state."""
    return session_response(session)


@app.post("/session/toggle", response_model=SessionResponse)
async def session_toggle(request: ToggleRequest, session: PracticeSession = Depends(get_session)):
    """Flip the measure count or the score/solfège visibility."""
    try:
        session.toggle(request.name)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return session_response(session)


def _played_response(
    session: PracticeSession, melody: GeneratedMelody, synthesize_requested: bool
) -> SessionResponse:
    return session_response(
        session,
        melody=melody_to_model(melody),
        layout=layout_response(melody, session.measure_count) if session.show_score else None,
        captions=captions_response(melody) if session.show_solfege else None,
        audio=synthesize_audio(melody, session.bpm) if synthesize_requested else None,
    )


@app.post("/session/regenerate", response_model=SessionResponse)
async def session_regenerate(
    request: RegenerateRequest, session: PracticeSession = Depends(get_session)
):
    """Generate, lay out and play a new melody."""
    try:
        melody = session.regenerate(
            mode=request.mode,
            key_root=request.key_root,
            key_mode=request.key_mode,
            seed=request.seed,
        )
        return _played_response(session, melody, request.synthesize)
    except SessionBusyError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except ValueError as exc:
        logger.error(f"Validation error: {exc}")
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:  # pragma: no cover - unexpected errors
        logger.error(f"Regenerate error: {exc}")
        raise HTTPException(status_code=500, detail="Regenerate failed") from exc


@app.post("/session/replay", response_model=SessionResponse)
async def session_replay(request: ReplayRequest, session: PracticeSession = Depends(get_session)):
    """Play the last melody again."""
    try:
        melody = session.replay()
        return _played_response(session, melody, request.synthesize)
    except NothingToReplayError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except SessionBusyError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc


@app.post("/session/press", response_model=ScheduleResponse)
async def session_press(request: PressRequest, session: PracticeSession = Depends(get_session)):
    """Sound a single key right away."""
    try:
        pitch = parse_pitch(request.pitch)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    note = session.press_key(pitch, request.duration)
    return ScheduleResponse(
        notes=[ScheduledNoteModel(pitch=str(note.pitch), start=note.start, release=note.release)],
        length=note.release,
        bpm=int(session.bpm),
    )


if __name__ == "__main__":  # pragma: no cover
    import uvicorn

    uvicorn.run(
        "pods.practice.main:app",
        host="0.0.0.0",
        port=config.SERVICE_PORT,
        reload=config.ENV == "dev",
        log_level="info",
    )
