"""CLI tool for LinkPreview.

Usage:
    linkpreview preview "have a look at https://example.com"
    linkpreview --output text preview "bit.ly/xyz is neat"
    linkpreview preview "https://example.com" --no-cache --timeout 5 -v
    linkpreview locate "text with www.example.com inside"

Exit status is 0 on success and the preview error code (1-4) on failure.
"""

import argparse
import asyncio
import json
import logging
import sys

TEXT_FIELDS = (
    ("title", "Title"),
    ("description", "Description"),
    ("canonicalUrl", "Canonical URL"),
    ("finalUrl", "Final URL"),
    ("icon", "Icon"),
    ("image", "Image"),
    ("video", "Video"),
    ("price", "Price"),
)


def _setup_logging(verbose: bool = False):
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


async def _cmd_preview(args) -> int:
    """Build a preview for the first URL in the given text."""
    from linkpreview.config import Settings
    from linkpreview.core.exceptions import PreviewError
    from linkpreview.services.preview import LinkPreview

    # Flags override LINKPREVIEW_* environment values only when given.
    overrides = {}
    if args.no_cache:
        overrides["CACHE_ENABLED"] = False
    if args.timeout is not None:
        overrides["REQUEST_TIMEOUT"] = args.timeout
    config = Settings(**overrides)

    async with LinkPreview(config=config) as link_preview:
        try:
            result = await link_preview.get_preview(args.text)
        except PreviewError as e:
            if args.output == "json":
                print(json.dumps(e.to_dict(), indent=2, ensure_ascii=False))
            else:
                print(f"Error {int(e.code)}: {e.description}", file=sys.stderr)
            return int(e.code)

    output = result.to_dict()
    if args.output == "json":
        print(json.dumps(output, indent=2, ensure_ascii=False))
    else:
        print(output["url"])
        for key, label in TEXT_FIELDS:
            if output.get(key):
                print(f"  {label}: {output[key]}")
        images = output.get("images") or []
        if len(images) > 1:
            print(f"  Images ({len(images)}):")
            for image in images[:10]:
                print(f"    {image}")
    return 0


def _cmd_locate(args) -> int:
    """Print the first URL found in the text."""
    from linkpreview.core.exceptions import ErrorCode
    from linkpreview.services.url_locator import locate_url

    url = locate_url(args.text)
    if url is None:
        print("No URL has been found", file=sys.stderr)
        return int(ErrorCode.NO_URL_HAS_BEEN_FOUND)
    print(url)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linkpreview",
        description="LinkPreview CLI: turn text containing a link into a preview",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "-o", "--output", default="json",
        choices=["json", "text"],
        help="Output format (default: json)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # --- preview ---
    preview_parser = subparsers.add_parser("preview", help="Preview the first link in TEXT")
    preview_parser.add_argument("text", help="Free text containing a URL")
    preview_parser.add_argument("--no-cache", action="store_true", help="Disable the response cache")
    preview_parser.add_argument(
        "--timeout", type=float, default=None,
        help="Per-request timeout in seconds (default: LINKPREVIEW_REQUEST_TIMEOUT or 15)",
    )

    # --- locate ---
    locate_parser = subparsers.add_parser("locate", help="Print the first URL found in TEXT")
    locate_parser.add_argument("text", help="Free text containing a URL")

    return parser


def main(argv: list[str] | None = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    _setup_logging(args.verbose)

    if args.command == "preview":
        sys.exit(asyncio.run(_cmd_preview(args)))
    elif args.command == "locate":
        sys.exit(_cmd_locate(args))


if __name__ == "__main__":
    main()
