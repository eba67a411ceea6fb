"""Application entry point for the agora content tools."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint

import settings
from adapters.emoticons import EmoticonTable
from adapters.html_sanitizer import BleachSanitizer
from adapters.markdown_compiler import PythonMarkdownCompiler
from adapters.short_links import ShortLinkResolver
from adapters.sqlite_member_store import SQLiteMemberStore
from core.config import DirectoryConfig, MentionConfig, RenderConfig, Whitelist
from core.directory import DirectoryIndex
from core.mentions import MentionExtractor
from core.models import ContentItem, ContentKind
from core.renderer import ContentRenderer

NAME = "AGORA"
FONT = "tarty-1"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", False):
        return

    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter(fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        # stdout carries command output, so log records go to stderr.
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/agora.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        file_handler = RotatingFileHandler(
            path,
            maxBytes=int(file_cfg.get("max_bytes", 5 * 1024 * 1024)),
            backupCount=int(file_cfg.get("backup_count", 5)),
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


@dataclass
class Services:
    """Wired core components sharing one store and one directory index."""

    store: SQLiteMemberStore
    directory: DirectoryIndex
    extractor: MentionExtractor
    renderer: ContentRenderer


def build_services(db_path: str) -> Services:
    """Build the core pipeline from settings, injecting the default adapters."""

    store = SQLiteMemberStore(db_path, null_user_name=settings.NULL_USER_NAME)
    store.init_db()

    directory = DirectoryIndex(
        store,
        DirectoryConfig(
            default_avatar_url=settings.DEFAULT_AVATAR_URL,
            null_user_name=settings.NULL_USER_NAME,
            prefix_limit=settings.PREFIX_LIMIT,
        ),
    )
    extractor = MentionExtractor(directory, MentionConfig(max_name_length=settings.MAX_NAME_LENGTH))
    render_config = RenderConfig(
        serve_path=settings.SERVE_PATH,
        whitelist=Whitelist(
            tags=settings.ALLOWED_TAGS,
            attributes=settings.ALLOWED_ATTRIBUTES,
            protocols=settings.ALLOWED_PROTOCOLS,
        ),
        preview_max_chars=settings.PREVIEW_MAX_CHARS,
        preview_marker=settings.PREVIEW_MARKER,
        content_blocked_label=settings.CONTENT_BLOCKED_LABEL,
        discussion_label=settings.DISCUSSION_LABEL,
    )
    renderer = ContentRenderer(
        extractor=extractor,
        members=store,
        short_links=ShortLinkResolver(settings.SERVE_PATH, store),
        emoticons=EmoticonTable(settings.STATIC_PATH, settings.EMOTICON_NAMES),
        markdown=PythonMarkdownCompiler(),
        sanitizer=BleachSanitizer(),
        config=render_config,
    )
    return Services(store=store, directory=directory, extractor=extractor, renderer=renderer)


def _read_markup(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8") as handle:
        return handle.read()


def _cmd_add_member(services: Services, args: argparse.Namespace) -> None:
    member_id = services.store.add_member(args.name, avatar_url=args.avatar or "", valid=not args.invalid)
    # New members must become searchable without a restart.
    services.directory.reload()
    print(member_id)


def _cmd_search(services: Services, args: argparse.Namespace) -> None:
    for entry in services.directory.prefix_search(args.prefix, args.limit):
        print(f"{entry.name} | {entry.avatar_url}")


def _cmd_mentions(services: Services, args: argparse.Namespace) -> None:
    for name in sorted(services.extractor.extract(args.text)):
        print(name)


def _cmd_render(services: Services, args: argparse.Namespace) -> None:
    print(services.renderer.render_full(_read_markup(args.file)))


def _cmd_preview(services: Services, args: argparse.Namespace) -> None:
    author = services.store.find_by_exact_name(args.author)
    if author is None:
        raise RuntimeError(f"Unknown author: {args.author}")

    viewer_id: Optional[str] = None
    if args.viewer:
        viewer = services.store.find_by_exact_name(args.viewer)
        if viewer is None:
            raise RuntimeError(f"Unknown viewer: {args.viewer}")
        viewer_id = viewer.id

    item = ContentItem(
        id="cli",
        author_id=author.id,
        author_name=author.name,
        body_markup=_read_markup(args.file),
        kind=ContentKind.DISCUSSION if args.discussion else ContentKind.NORMAL,
        author_account_valid=author.valid,
        valid=not args.blocked,
    )
    result = services.renderer.render_preview(item, viewer_id)
    print(result.html)
    if result.truncated:
        logging.getLogger(__name__).info("Preview truncated to %s characters", settings.PREVIEW_MAX_CHARS)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="agora")
    parser.add_argument("--db", default=None, help="SQLite database path (defaults to settings)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create the member tables")

    add_member = subparsers.add_parser("add-member", help="Register a member")
    add_member.add_argument("name")
    add_member.add_argument("--avatar", default="")
    add_member.add_argument("--invalid", action="store_true", help="Create the account as invalid")

    search = subparsers.add_parser("search", help="Prefix search over member names")
    search.add_argument("prefix")
    search.add_argument("--limit", type=int, default=None)

    mentions = subparsers.add_parser("mentions", help="List confirmed @mentions in a text")
    mentions.add_argument("text")

    render = subparsers.add_parser("render", help="Render a markup file to HTML ('-' for stdin)")
    render.add_argument("file")

    preview = subparsers.add_parser("preview", help="Render a permission-gated preview")
    preview.add_argument("file")
    preview.add_argument("--author", required=True)
    preview.add_argument("--viewer", default=None)
    preview.add_argument("--discussion", action="store_true")
    preview.add_argument("--blocked", action="store_true", help="Mark the item itself as invalid")

    return parser


COMMANDS = {
    "add-member": _cmd_add_member,
    "search": _cmd_search,
    "mentions": _cmd_mentions,
    "render": _cmd_render,
    "preview": _cmd_preview,
}


def main(argv: Optional[list[str]] = None) -> None:
    args = _build_parser().parse_args(argv)
    _configure_logging()
    logger = logging.getLogger(__name__)

    services = build_services(args.db or settings.DB_PATH)
    if args.command == "init-db":
        _print_banner()
        logger.info("Database ready at %s", args.db or settings.DB_PATH)
        return

    # Explicit lifecycle: load the directory once, tear it down on exit.
    services.directory.reload()
    try:
        COMMANDS[args.command](services, args)
    finally:
        services.directory.close()


if __name__ == "__main__":
    main()
