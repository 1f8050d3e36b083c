"""Capture a URL as PDF and/or screenshot from the command line."""

from __future__ import annotations

import argparse
from typing import Any, Dict, Optional, Sequence

from .browser import Browser
from .config import (
    BrowserConfig,
    ConfigError,
    browser_config_from_mapping,
    load_config,
)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments controlling a single capture run."""

    parser = argparse.ArgumentParser(
        description="Render a URL in headless Chromium and export it.",
    )
    parser.add_argument("url", help="Page to visit (https:// is assumed).")
    parser.add_argument(
        "--config",
        default=None,
        help="Config JSON file (defaults to headless.json when present).",
    )
    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory for exports; falls back to a temporary directory.",
    )
    parser.add_argument("--pdf", metavar="FILE", help="Export a PDF file.")
    parser.add_argument(
        "--screenshot", metavar="FILE", help="Export a PNG screenshot."
    )
    parser.add_argument(
        "--format", default=None, help="PDF paper format (default: A4)."
    )
    parser.add_argument(
        "--viewport-only",
        action="store_true",
        help="Capture only the visible viewport instead of the full page.",
    )
    geometry = parser.add_mutually_exclusive_group()
    geometry.add_argument(
        "--maximize", action="store_true", help="Use a 1600x1200 viewport."
    )
    geometry.add_argument(
        "--fit-content",
        action="store_true",
        help="Size the viewport to the page body.",
    )
    parser.add_argument(
        "--width", type=int, help="Viewport width in pixels (needs --height)."
    )
    parser.add_argument(
        "--height", type=int, help="Viewport height in pixels (needs --width)."
    )
    parser.add_argument(
        "--title", action="store_true", help="Print the page title."
    )
    parser.add_argument(
        "--text", action="store_true", help="Print the visible page text."
    )
    args = parser.parse_args(argv)
    if (args.width is None) != (args.height is None):
        parser.error("--width and --height must be given together")
    if args.width is not None and (args.maximize or args.fit_content):
        parser.error(
            "--width/--height cannot be combined with --maximize or --fit-content"
        )
    return args


def resolve_settings(
    config_path: Optional[str],
) -> tuple[BrowserConfig, Dict[str, Any]]:
    """Return the browser config and raw mapping for this run.

    A missing default config file is fine; an explicit ``--config`` that
    cannot be loaded is an error.
    """

    try:
        mapping = load_config(config_path)
    except ConfigError:
        if config_path:
            raise
        mapping = {}
    return browser_config_from_mapping(mapping), mapping


def run(args: argparse.Namespace) -> list[str]:
    """Execute the capture described by ``args`` and return written paths."""

    config, mapping = resolve_settings(args.config)
    output_dir = args.output_dir or mapping.get("output_dir") or ""
    written: list[str] = []

    with Browser.launch(output_dir, config, pdf_format=args.format) as browser:
        browser.visit(args.url)
        if args.maximize:
            browser.maximize()
        elif args.width is not None:
            browser.resize(args.width, args.height)
        elif args.fit_content:
            browser.fit_content()

        if args.title:
            print(browser.title())
        if args.text:
            print(browser.text())
        if args.pdf:
            written.append(browser.pdf(args.pdf))
            print(f"✅ PDF written: {written[-1]}")
        if args.screenshot:
            written.append(
                browser.screenshot(
                    args.screenshot,
                    full_page=False if args.viewport_only else None,
                )
            )
            print(f"✅ Screenshot written: {written[-1]}")
        if written and browser.output_dir == str(browser.tmp_dir):
            print(
                "⚠️ Output directory missing; exports were written to the "
                "session temp directory and removed on exit."
            )

    return written


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Entry point for the ``headless-render`` CLI."""

    args = parse_args(argv)
    try:
        run(args)
    except ConfigError as exc:
        raise SystemExit(f"Config error: {exc}") from exc


if __name__ == "__main__":
    main()
