"""FastAPI application and routes."""

import logging
from contextlib import asynccontextmanager
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException, UploadFile, File
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from tavern_engine import __version__
from tavern_engine.config import ConfigLoader, ConfigLoadError, SystemConfig
from tavern_engine.errors import CardError, ParseError, UnsupportedFileTypeError
from tavern_engine.models import CharacterProfile, ChatMessage, ChatPreset, WorldBook
from tavern_engine.services.character_cards import CharacterCardImporter
from tavern_engine.services.presets import import_preset
from tavern_engine.services.prompt_assembly import PromptAssemblyService
from tavern_engine.services.world_info import import_world_book

logger = logging.getLogger(__name__)


# Read-only after startup
app_state: Dict[str, object] = {
    "system_config": SystemConfig(),
    "presets": {},
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown logic."""
    logger.info("Starting Tavern Engine API...")

    loader = ConfigLoader()
    try:
        system_config = loader.load_system_config()
    except ConfigLoadError as e:
        logger.error(f"Failed to load system config, using defaults: {e}")
        system_config = SystemConfig()

    app_state["system_config"] = system_config
    app_state["presets"] = loader.load_all_presets(system_config.paths.presets)
    logger.info(f"✓ Loaded {len(app_state['presets'])} preset(s)")

    yield

    logger.info("Shutting down Tavern Engine API")


app = FastAPI(
    title="Tavern Engine",
    description="Roleplay prompt assembly and character card import",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ===== Request/Response Models =====

class HealthResponse(BaseModel):
    status: str
    version: str
    presets_loaded: int


class ContextBuildRequest(BaseModel):
    """Inputs for one context assembly."""
    user_name: Optional[str] = None
    preset: Optional[ChatPreset] = None
    preset_name: Optional[str] = None
    character: Optional[CharacterProfile] = None
    world_book: Optional[WorldBook] = None
    messages: List[ChatMessage] = Field(default_factory=list)


class ContextBuildResponse(BaseModel):
    system_prompt: str
    history: List[ChatMessage]
    lore_inserted: List[str]
    total_tokens: int


async def _read_upload(file: UploadFile) -> bytes:
    data = await file.read()
    await file.close()
    return data


def _decode_text(data: bytes) -> str:
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise HTTPException(status_code=400, detail=f"File is not UTF-8: {e}")


# ===== Routes =====

@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Check system health."""
    return HealthResponse(
        status="ok",
        version=__version__,
        presets_loaded=len(app_state["presets"]),
    )


@app.post("/characters/import", response_model=CharacterProfile)
async def import_character(file: UploadFile = File(...)):
    """Import a character from a JSON card or PNG character card."""
    data = await _read_upload(file)
    try:
        return CharacterCardImporter().import_file(data, file.filename or "")
    except UnsupportedFileTypeError as e:
        raise HTTPException(status_code=415, detail=str(e))
    except CardError as e:
        logger.warning(f"Character import failed for {file.filename}: {e}")
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/world-books/import", response_model=WorldBook)
async def import_world_book_file(file: UploadFile = File(...)):
    """Import a world book from JSON."""
    text = _decode_text(await _read_upload(file))
    try:
        return import_world_book(text, file.filename)
    except ParseError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/presets/import", response_model=ChatPreset)
async def import_preset_file(file: UploadFile = File(...)):
    """Import a chat preset from JSON."""
    text = _decode_text(await _read_upload(file))
    try:
        return import_preset(text, file.filename)
    except ParseError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/context/build", response_model=ContextBuildResponse)
async def build_context(request: ContextBuildRequest):
    """
    Assemble the system prompt and history window for the next turn.

    The preset comes from the request body, else from a preset loaded at
    startup by name, else the built-in defaults.
    """
    system_config: SystemConfig = app_state["system_config"]

    preset = request.preset
    if preset is None and request.preset_name:
        preset = app_state["presets"].get(request.preset_name)
        if preset is None:
            raise HTTPException(status_code=404, detail=f"Preset not found: {request.preset_name}")
    if preset is None:
        preset = ChatPreset()

    assembler = PromptAssemblyService(min_history_tokens=system_config.context.min_history_tokens)
    result = assembler.build_context(
        user_name=request.user_name or system_config.context.user_name,
        preset=preset,
        messages=request.messages,
        character=request.character,
        world_book=request.world_book,
    )
    return ContextBuildResponse(
        system_prompt=result.system_prompt,
        history=result.history,
        lore_inserted=result.lore_inserted,
        total_tokens=result.total_tokens,
    )
