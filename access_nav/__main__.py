"""Command line entry point for the screen reader navigation layer."""

from __future__ import annotations

import argparse
import json
import logging
import threading
from functools import partial

from . import logging as nav_logging
from .app import Application
from .config import CONFIG_FILE, load_config, save_config
from .input_source import KeyboardInput, TickLoop
from .providers import JsonDataProvider
from .speech import ConsoleSpeech, ScreenReaderSpeech

logger = logging.getLogger(__name__)


def schedule_events(app: Application, loop: TickLoop, script: list) -> list[threading.Timer]:
    """Replay ``[{"after": s, "kind": k, "event": {...}}]`` entries from the world file."""
    timers = []
    for entry in script:
        try:
            delay, kind, payload = float(entry["after"]), entry["kind"], entry["event"]
        except (KeyError, TypeError, ValueError):
            logger.warning("Skipping malformed scripted event %r", entry)
            continue
        stream = app.context.fetch_events(kind)
        timer = threading.Timer(delay, loop.post, args=(partial(stream.emit, payload),))
        timer.daemon = True
        timer.start()
        timers.append(timer)
    return timers


def main(argv: list[str] | None = None) -> None:
    """Run the navigation layer against a recorded world file."""
    parser = argparse.ArgumentParser(
        description="Keyboard and speech navigation over a recorded game world",
    )
    parser.add_argument(
        "--world",
        required=True,
        help="Path to a world JSON file (menus, objects, scan, events)",
    )
    parser.add_argument(
        "--config",
        default=CONFIG_FILE,
        help="Path to the settings JSON",
    )
    parser.add_argument(
        "--console",
        action="store_true",
        help="Print announcements instead of using the screen reader",
    )
    parser.add_argument(
        "--save-config",
        action="store_true",
        help="Write the effective settings back to --config and exit",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    nav_logging.setup(logging.DEBUG if args.verbose else logging.INFO)

    cfg = load_config(args.config)
    if args.save_config:
        save_config(cfg, args.config)
        return

    try:
        provider = JsonDataProvider(args.world)
    except FileNotFoundError:
        parser.error(f"World file '{args.world}' not found")
    except json.JSONDecodeError as exc:
        parser.error(f"Invalid JSON in world file '{args.world}': {exc.msg}")
    except ValueError as exc:
        parser.error(str(exc))

    speech = ConsoleSpeech() if args.console else ScreenReaderSpeech()
    app = Application(provider, speech, cfg)
    app.enter_scene()

    loop = TickLoop()
    keyboard = KeyboardInput(app.chain, loop)
    stop = threading.Event()
    schedule_events(app, loop, provider.data.get("script", []))

    keyboard.start()
    speech.say("Navigation ready")
    try:
        loop.run(stop)
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        keyboard.stop()
        app.leave_scene()


if __name__ == "__main__":  # pragma: no cover - manual entry point
    main()
