from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from .__version__ import __version__
from .config import AppConfig, load_config
from .enhance import get_provider as get_enhancer
from .handoff import available_methods
from .session import ActionResult, SessionController
from .storage import DraftRepository, KeyValueStore, SettingsRepository

log = logging.getLogger("ideainbox")


def configure_logging(log_path: Path, verbose: bool) -> None:
    """File logging always; console logging only when verbose."""
    log_path.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.FileHandler(log_path, encoding="utf-8"),
            logging.StreamHandler() if verbose else logging.NullHandler(),
        ],
    )


def build_session(cfg: AppConfig, store: Optional[KeyValueStore] = None) -> SessionController:
    store = store or KeyValueStore(cfg.db_path)
    return SessionController(
        SettingsRepository(store, cfg.default_settings),
        DraftRepository(store),
        get_enhancer(cfg.enhancer, cfg.max_length),
        handoff_method=cfg.handoff,
        debounce_ms=cfg.debounce_ms,
        max_length=cfg.max_length,
    )


def export_status_json(cfg: AppConfig, session: SessionController) -> dict:
    """Export configuration, settings and draft state as a dict."""
    return {
        "version": __version__,
        "database_path": str(cfg.db_path),
        "log_path": str(cfg.log_path),
        "settings": session.settings.to_dict(),
        "draft": {
            "present": bool(session.text),
            "length": len(session.text),
        },
        "providers": {
            "enhancer": session.enhancer.name,
            "enhancer_ready": session.enhancer.validate_connection(),
            "handoff": cfg.handoff,
        },
        "limits": {
            "max_length": cfg.max_length,
            "debounce_ms": cfg.debounce_ms,
        },
    }


def print_preview(session: SessionController) -> None:
    payload = session.payload()
    if payload is None:
        return
    print(f"--- {payload.file_name} -> {payload.collection_name or '(no vault)'}:{payload.destination_ref}")
    print(payload.export_text)
    print("---")


def report(result: ActionResult) -> int:
    stream = sys.stdout if result.ok else sys.stderr
    print(result.message, file=stream)
    return 0 if result.ok else 1


def _read_text(args: argparse.Namespace) -> Optional[str]:
    if args.text == "-":
        return sys.stdin.read()
    return args.text


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="IdeaInbox: turn a quick idea into a tidy note and hand it to your vault"
    )
    parser.add_argument(
        "text",
        nargs="?",
        help="Note text ('-' reads stdin). Defaults to the saved draft.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"IdeaInbox {__version__}",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging output",
    )
    parser.add_argument(
        "--send",
        metavar="METHOD",
        choices=[*available_methods(), "noop"],
        help="Hand-off method: " + ", ".join(available_methods()),
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Process and print the note without handing it off",
    )
    parser.add_argument(
        "--verbatim",
        action="store_true",
        help="Skip formatting and keep the text as written",
    )
    parser.add_argument(
        "--draft",
        action="store_true",
        help="Only save the text as the current draft",
    )
    parser.add_argument(
        "--clear-draft",
        action="store_true",
        help="Discard the saved draft",
    )
    parser.add_argument("--collection", help="Save the target vault name")
    parser.add_argument("--sub-path", help="Save the target folder inside the vault")
    parser.add_argument(
        "--show-settings",
        action="store_true",
        help="Print the saved settings",
    )
    parser.add_argument(
        "--export-status",
        action="store_true",
        help="Export configuration and state as JSON",
    )
    return parser.parse_args(argv)


async def run(args: argparse.Namespace, session: SessionController) -> int:
    if args.collection is not None or args.sub_path is not None:
        result = session.save_settings(
            args.collection if args.collection is not None else session.settings.collection_name,
            args.sub_path if args.sub_path is not None else session.settings.sub_path,
        )
        if report(result):
            return 1

    if args.show_settings:
        print(json.dumps(session.settings.to_dict(), indent=2))

    if args.clear_draft:
        return report(session.discard())

    text = _read_text(args)
    if text is not None:
        session.edit(text)

    if args.draft:
        session.close()
        print(f"Draft saved ({len(session.text)} chars).")
        return 0

    settings_only = args.collection is not None or args.sub_path is not None or args.show_settings
    if text is None and settings_only:
        return 0

    if text is None and not session.text:
        print("Nothing to process: pass some text or '-' to read stdin.", file=sys.stderr)
        return 1

    if args.verbatim:
        result = session.use_verbatim()
    else:
        result = await session.process()
    if report(result):
        return 1

    print_preview(session)
    if args.preview:
        return 0

    sent = session.send(args.send)
    if sent.ok:
        # Delivered; the draft has served its purpose
        session.discard()
    return report(sent)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)

    try:
        cfg = load_config()
    except RuntimeError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    configure_logging(cfg.log_path, cfg.verbose or args.verbose)
    log.debug(f"Startup configuration: enhancer={cfg.enhancer!r}, handoff={cfg.handoff!r}")

    store = KeyValueStore(cfg.db_path)
    try:
        session = build_session(cfg, store)
    except RuntimeError as e:
        store.close()
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    try:
        if args.export_status:
            print(json.dumps(export_status_json(cfg, session), indent=2))
            return 0
        return asyncio.run(run(args, session))
    finally:
        session.close()
        store.close()


if __name__ == "__main__":
    sys.exit(main())
