"""
CLI entry point.

Commands:
- init: Initialize data directory
- models: Show task registry
- sentiment TEXT: Classify sentiment
- generate TEXT: Generate text
- remember TEXT: Store a fact in memory
- search QUERY [-k N]: Find similar facts
- ask QUESTION: Answer from stored facts

Flags:
- --debug: Enable debug logging to file
"""

import asyncio
import logging
import sys

from orbit.core.config import Settings, get_settings
from orbit.core.logging import get_logger, setup_logging

USAGE = """Usage: orbit [--debug] <command> [args]
Commands: init, models, sentiment, generate, remember, search, ask
Flags: --debug (enable debug logging to data/orbit.log)"""


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = list(sys.argv[1:] if argv is None else argv)
    settings = get_settings()

    debug_mode = "--debug" in args
    if debug_mode:
        args.remove("--debug")

    log_level = logging.DEBUG if debug_mode else logging.INFO
    log_file = settings.data_dir / "orbit.log"
    setup_logging(level=log_level, log_file=log_file)
    logger = get_logger("cli")

    logger.info(f"Logging to {log_file}" + (" (debug mode)" if debug_mode else ""))

    if not args:
        print(USAGE)
        return 1

    command, rest = args[0], args[1:]

    if command == "init":
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"Initialized data directory: {settings.data_dir}")
        print(f"Created: {settings.data_dir}")
        return 0

    if command == "models":
        return _show_models(settings)

    if command in ("sentiment", "generate", "remember", "search", "ask"):
        if not rest:
            print(f"Usage: orbit {command} TEXT")
            return 1
        try:
            return asyncio.run(_dispatch(settings, command, rest))
        except Exception as e:
            logger.error(f"Command {command} failed: {e}", exc_info=True)
            print(f"Error: {e}")
            return 1

    print(f"Unknown command: {command}")
    return 1


def _show_models(settings: Settings) -> int:
    from orbit.models.base import default_registry

    registry = default_registry().with_overrides(settings.model_overrides())
    for task, spec in registry.specs.items():
        print(f"{task.value:<20} {spec.model_id}  [{spec.pipeline_task}]")
    return 0


def _parse_top_k(rest: list[str], default: int) -> tuple[list[str], int]:
    """Strip a -k N option from the argument list."""
    if "-k" not in rest:
        return rest, default
    i = rest.index("-k")
    try:
        top_k = int(rest[i + 1])
    except (IndexError, ValueError):
        raise ValueError("-k expects an integer") from None
    return rest[:i] + rest[i + 2:], top_k


async def _dispatch(settings: Settings, command: str, rest: list[str]) -> int:
    """Run one SDK command inside a started Orbit instance."""
    from orbit.core.context import Orbit
    from orbit.models.base import ModelTask

    def on_progress(event: dict) -> None:
        if event.get("status") == "initiate":
            print(f"Loading {event.get('name')}...", file=sys.stderr)

    async with Orbit(settings) as orbit:
        if command == "sentiment":
            text = " ".join(rest)
            await orbit.models.load_model(ModelTask.SENTIMENT, on_progress)
            for item in await orbit.models.run(ModelTask.SENTIMENT, text):
                print(f"{item['label']} ({item['score']:.3f})")
            return 0

        if command == "generate":
            text = " ".join(rest)
            await orbit.models.load_model(ModelTask.GENERATION, on_progress)
            result = await orbit.models.run(ModelTask.GENERATION, text)
            print(result[0]["generated_text"] if result else "")
            return 0

        if command == "remember":
            text = " ".join(rest)
            await orbit.models.load_model(ModelTask.FEATURE_EXTRACTION, on_progress)
            added = await orbit.memory.add(text)
            print(f"Stored: {added.id}")
            if not added.persisted:
                print(f"Warning: not saved to disk: {added.error}")
            return 0

        if command == "search":
            terms, top_k = _parse_top_k(rest, settings.ask_top_k)
            await orbit.models.load_model(ModelTask.FEATURE_EXTRACTION, on_progress)
            results = await orbit.memory.search(" ".join(terms), top_k)
            if not results:
                print("No memories stored.")
            for hit in results:
                print(f"{hit.score:.3f}  {hit.text}  [{hit.id}]")
            return 0

        # ask
        question = " ".join(rest)
        await orbit.models.load_model(ModelTask.FEATURE_EXTRACTION, on_progress)
        await orbit.models.load_model(ModelTask.GENERATION, on_progress)
        print(await orbit.models.ask(question))
        return 0


if __name__ == "__main__":
    sys.exit(main())
