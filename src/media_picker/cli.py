"""Command line client for picking and downloading media."""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from collections.abc import Callable
from pathlib import Path

from media_picker.app_logging import configure_logging
from media_picker.containers import AppContainer, build_container
from media_picker.domain.errors import (
    PickerError,
    PollTimeoutError,
    UnauthenticatedError,
)
from media_picker.domain.media import MediaVariant

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_UNAUTHENTICATED = 2
EXIT_POLL_TIMEOUT = 3


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Pick media with the Google Photos Picker and fetch it."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_token_argument(subparser: argparse.ArgumentParser) -> None:
        subparser.add_argument(
            "--token",
            default=os.getenv("MEDIA_PICKER_TOKEN", ""),
            help="OAuth bearer token (default: $MEDIA_PICKER_TOKEN).",
        )

    pick_parser = subparsers.add_parser(
        "pick",
        help="Open a picker session, wait for the selection and list it.",
    )
    add_token_argument(pick_parser)
    pick_parser.add_argument(
        "--owner-key",
        default=os.getenv("MEDIA_PICKER_OWNER_KEY", ""),
        help="Stable user id the session is tracked under.",
    )
    pick_parser.add_argument(
        "--new",
        action="store_true",
        help="Start over with a new session instead of reusing the tracked one.",
    )
    pick_parser.add_argument("--page-size", type=int, default=None)

    download_parser = subparsers.add_parser(
        "download",
        help="Stream one media item to a local file.",
    )
    add_token_argument(download_parser)
    download_parser.add_argument("--base-url", required=True)
    download_parser.add_argument(
        "--variant",
        choices=[variant.value for variant in MediaVariant],
        default=MediaVariant.DOWNLOAD.value,
    )
    download_parser.add_argument("--output", required=True, type=Path)

    return parser


async def _pick(container: AppContainer, args: argparse.Namespace) -> int:
    manager = container.session_manager
    if args.new:
        session = await manager.create_session(args.owner_key, args.token)
    else:
        session = await manager.ensure_session(args.owner_key, args.token)

    if not session.media_items_set:
        print(f"Open this link to pick your media: {session.picker_uri}")
        controller = container.polling_controller(args.owner_key, args.token)
        completed = await controller.poll()
        if completed is None:
            print("Polling cancelled.", file=sys.stderr)
            return EXIT_ERROR
        session = completed

    page = await container.media_browser.list_page(
        session.id, args.token, page_size=args.page_size
    )
    for item in page.items:
        print(f"{item.type.value}\t{item.filename}\t{item.base_url}")
    if page.next_page_token:
        print(f"nextPageToken={page.next_page_token}")
    return EXIT_OK


async def _download(container: AppContainer, args: argparse.Namespace) -> int:
    download = await container.media_browser.fetch_media_bytes(
        args.base_url, args.token, MediaVariant(args.variant)
    )
    written = 0
    try:
        with args.output.open("wb") as handle:
            async for chunk in download.relay():
                handle.write(chunk)
                written += len(chunk)
    finally:
        await download.aclose()
    print(f"Wrote {written} bytes ({download.content_type}) to {args.output}")
    return EXIT_OK


async def _run(
    args: argparse.Namespace, container_factory: Callable[[], AppContainer]
) -> int:
    container = container_factory()
    handlers = {"pick": _pick, "download": _download}
    try:
        return await handlers[args.command](container, args)
    finally:
        await container.close_resources()


def main(
    argv: list[str] | None = None,
    container_factory: Callable[[], AppContainer] = build_container,
) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging()

    try:
        return asyncio.run(_run(args, container_factory))
    except UnauthenticatedError as exc:
        print(f"{exc}. Pass --token (and --owner-key for pick).", file=sys.stderr)
        return EXIT_UNAUTHENTICATED
    except PollTimeoutError as exc:
        print(f"{exc}. Run pick again to keep waiting.", file=sys.stderr)
        return EXIT_POLL_TIMEOUT
    except PickerError as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
