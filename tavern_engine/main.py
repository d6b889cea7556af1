"""Command-line entry point for Tavern Engine."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from tavern_engine.config import ConfigLoader, ConfigLoadError, SystemConfig
from tavern_engine.errors import TavernEngineError
from tavern_engine.models import ChatMessage, ChatPreset
from tavern_engine.services.character_cards import CharacterCardExporter, CharacterCardImporter
from tavern_engine.services.presets import import_preset
from tavern_engine.services.prompt_assembly import PromptAssemblyService
from tavern_engine.services.world_info import import_world_book

logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False) -> None:
    """Configure logging."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True
    )

    # Only set DEBUG for our app loggers, not third-party libraries
    logging.getLogger('tavern_engine').setLevel(logging.DEBUG if debug else logging.INFO)

    # Silence noisy third-party loggers
    logging.getLogger('httpcore').setLevel(logging.WARNING)
    logging.getLogger('httpx').setLevel(logging.WARNING)


def _load_config(path: Optional[str]) -> SystemConfig:
    loader = ConfigLoader()
    return loader.load_system_config(Path(path) if path else None)


def _read_messages(path: Path) -> List[ChatMessage]:
    raw = json.loads(path.read_text(encoding='utf-8'))
    if not isinstance(raw, list):
        raise ValueError(f"Messages file must hold a JSON list: {path}")
    messages = []
    for index, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ValueError(f"Message {index} in {path} must be a JSON object")
        messages.append(ChatMessage(**item))
    return messages


def cmd_inspect_card(args: argparse.Namespace, config: SystemConfig) -> int:
    path = Path(args.file)
    profile = CharacterCardImporter().import_file(path.read_bytes(), path.name)
    print(profile.model_dump_json(indent=2))
    return 0


def cmd_export_card(args: argparse.Namespace, config: SystemConfig) -> int:
    source = Path(args.file)
    profile = CharacterCardImporter().import_file(source.read_bytes(), source.name)
    exporter = CharacterCardExporter()
    output = Path(args.output)
    if output.suffix.lower() == ".png":
        image = Path(args.image).read_bytes() if args.image else None
        output.write_bytes(exporter.export_png(profile, image))
    else:
        output.write_text(exporter.export_json(profile), encoding='utf-8')
    logger.info(f"Wrote {output}")
    return 0


def cmd_build_context(args: argparse.Namespace, config: SystemConfig) -> int:
    preset = ChatPreset()
    if args.preset:
        preset_path = Path(args.preset)
        preset = import_preset(preset_path.read_text(encoding='utf-8'), preset_path.name)

    character = None
    if args.character:
        character_path = Path(args.character)
        character = CharacterCardImporter().import_file(character_path.read_bytes(), character_path.name)

    world_book = None
    if args.world_book:
        world_book_path = Path(args.world_book)
        world_book = import_world_book(world_book_path.read_text(encoding='utf-8'), world_book_path.name)

    messages = _read_messages(Path(args.messages)) if args.messages else []

    assembler = PromptAssemblyService(min_history_tokens=config.context.min_history_tokens)
    result = assembler.build_context(
        user_name=args.user or config.context.user_name,
        preset=preset,
        messages=messages,
        character=character,
        world_book=world_book,
    )
    print(json.dumps({
        "system_prompt": result.system_prompt,
        "history": [message.model_dump(mode='json') for message in result.history],
        "lore_inserted": result.lore_inserted,
        "total_tokens": result.total_tokens,
    }, ensure_ascii=False, indent=2))
    return 0


def cmd_serve(args: argparse.Namespace, config: SystemConfig) -> int:
    import uvicorn

    logger.info(f"Server will listen on {config.api_host}:{config.api_port}")
    uvicorn.run(
        "tavern_engine.api.app:app",
        host=config.api_host,
        port=config.api_port,
        reload=False,
        log_level="info",
        log_config=None,  # Keep our basicConfig
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tavern-engine",
        description="Import character cards and assemble roleplay prompts."
    )
    parser.add_argument("--config", default=None, help="Path to system.yaml")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    inspect_parser = subparsers.add_parser("inspect-card", help="Print a character card as a profile")
    inspect_parser.add_argument("file", help="Card file (.json or .png)")
    inspect_parser.set_defaults(handler=cmd_inspect_card)

    export_parser = subparsers.add_parser("export-card", help="Re-export a card as JSON or PNG")
    export_parser.add_argument("file", help="Source card file (.json or .png)")
    export_parser.add_argument("output", help="Output path; .png writes a PNG card, anything else JSON")
    export_parser.add_argument("--image", default=None, help="PNG to embed the card into")
    export_parser.set_defaults(handler=cmd_export_card)

    context_parser = subparsers.add_parser("build-context", help="Assemble a prompt from files")
    context_parser.add_argument("--preset", default=None, help="Preset JSON")
    context_parser.add_argument("--character", default=None, help="Character card (.json or .png)")
    context_parser.add_argument("--world-book", default=None, help="World book JSON")
    context_parser.add_argument("--messages", default=None, help="JSON list of {role, content} messages")
    context_parser.add_argument("--user", default=None, help="User name")
    context_parser.set_defaults(handler=cmd_build_context)

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.set_defaults(handler=cmd_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = _load_config(args.config)
    except ConfigLoadError as e:
        setup_logging(debug=args.debug)
        logger.error(str(e))
        return 2

    setup_logging(debug=args.debug or config.debug)

    try:
        return args.handler(args, config)
    except (TavernEngineError, OSError, ValueError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
