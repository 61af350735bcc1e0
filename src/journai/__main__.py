"""Journai command-line entry point.

Usage:
    python -m journai [OPTIONS] COMMAND TEXT

Commands:
    classify    Classify the emotion of one sentence
    analyze     Classify every sentence of a note
    title       Generate a title for a note
    question    Generate a reflective question for a note
    process     Title plus emotion analysis for a note

Options:
    --config PATH    Path to YAML config file
    --profile NAME   Profile name (dev, prod, test)
    --mock-engine    Use the mock inference engine
    --version        Show version
"""

# Load .env file before anything else
try:
    from pathlib import Path as _Path

    from dotenv import load_dotenv

    _project_root = _Path(__file__).parent.parent.parent
    _env_file = _project_root / ".env"
    if _env_file.exists():
        load_dotenv(_env_file)
    else:
        load_dotenv()
except ImportError:
    pass  # python-dotenv not installed, skip

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from . import __version__
from .config import JournaiConfig
from .config.loader import load_config
from .config.profiles import detect_profile
from .emotion import EmotionClassifier, create_emotion_classifier
from .engine import GENERATOR_INPUTS, MockInferenceEngine
from .errors import JournaiError
from .generation import (
    GenerativeSession,
    QuestioningAgent,
    TitleGenerator,
    create_generative_session,
)
from .pipeline import NoteProcessor

MOCK_MODEL_BYTES = b"mock-model"

COMMANDS = ("classify", "analyze", "title", "question", "process")


def setup_logging(level: str) -> None:
    """Configure logging based on config."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="journai",
        description="Journai - on-device emotion analysis and note generation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m journai classify "I can't believe it worked."
  python -m journai --profile prod analyze "Long day. Glad it's over."
  echo "Went hiking..." | python -m journai title -

Environment:
  JOURNAI_PROFILE    Set profile (dev, prod, test)
""",
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Path to YAML config file",
        metavar="PATH",
    )

    parser.add_argument(
        "--profile",
        choices=["dev", "prod", "test"],
        help="Configuration profile to use",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Journai v{__version__}",
    )

    parser.add_argument(
        "--mock-engine",
        action="store_true",
        help="Use the mock inference engine (no model files needed)",
    )

    parser.add_argument("command", choices=COMMANDS, help="Operation to run")
    parser.add_argument("text", help="Input text, or '-' to read stdin")

    return parser.parse_args(argv)


def build_classifier(config: JournaiConfig, use_mock: bool) -> EmotionClassifier:
    """Create and initialize the emotion classifier from config."""
    classifier = create_emotion_classifier(config, use_mock=use_mock)
    if use_mock:
        classifier.initialize(MOCK_MODEL_BYTES, config.emotion.vocab_path)
    else:
        classifier.initialize_from_files(config.emotion.model_path, config.emotion.vocab_path)
    return classifier


def build_generator(config: JournaiConfig, use_mock: bool) -> GenerativeSession:
    """Create and initialize the generative session from config."""
    gen = config.generator
    if use_mock:
        # Mock decoding ends on the first step
        engine = MockInferenceEngine(input_names=GENERATOR_INPUTS)
        engine.set_next_tokens([gen.eos_token_id], vocab_size=max(gen.eos_token_id + 1, 32))
        session = create_generative_session(config, engine=engine)
        session.initialize(MOCK_MODEL_BYTES, gen.vocab_path, gen.merges_path)
    else:
        session = create_generative_session(config)
        session.initialize_from_files(gen.model_path, gen.vocab_path, gen.merges_path)
    return session


async def run_command(
    command: str, text: str, config: JournaiConfig, use_mock: bool = False
) -> Any:
    """Run one command and return a JSON-serializable result."""
    if command in ("classify", "analyze"):
        classifier = build_classifier(config, use_mock)
        try:
            if command == "classify":
                return (await classifier.classify(text)).to_dict()
            return [a.to_dict() for a in await classifier.analyze_sentences(text)]
        finally:
            classifier.dispose()

    if command in ("title", "question"):
        session = build_generator(config, use_mock)
        try:
            if command == "title":
                title_generator = TitleGenerator(session, config.generator.title_chars)
                return {"title": await title_generator.generate_title(text)}
            agent = QuestioningAgent(session, config.generator.question_chars)
            return {"question": await agent.generate_question(text)}
        finally:
            session.dispose()

    classifier = build_classifier(config, use_mock)
    try:
        session = build_generator(config, use_mock)
        try:
            title_generator = TitleGenerator(session, config.generator.title_chars)
            note = await NoteProcessor(title_generator, classifier).process(text)
            return {**note.to_dict(), "mood": note.mood}
        finally:
            session.dispose()
    finally:
        classifier.dispose()


def main(argv: list[str] | None = None) -> int:
    """Main entry point for Journai.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    args = parse_args(argv)

    try:
        if args.config:
            config = load_config(path=args.config)
        elif args.profile:
            config = load_config(profile=args.profile)
        else:
            config = load_config(profile=detect_profile().value)
    except FileNotFoundError as e:
        print(f"Error: Config file not found: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    setup_logging(config.logging.level)
    logger = logging.getLogger("journai")
    logger.debug(f"Journai v{__version__}, profile: {args.profile or detect_profile().value}")

    text = sys.stdin.read() if args.text == "-" else args.text
    use_mock = args.mock_engine or config.engine.use_mock

    try:
        result = asyncio.run(run_command(args.command, text, config, use_mock=use_mock))
    except JournaiError as e:
        logger.error(f"{args.command} failed: {e}")
        return 1
    except RuntimeError as e:
        # Engine backend unavailable
        logger.error(str(e))
        return 1

    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
