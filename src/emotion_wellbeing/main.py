"""Application entrypoint — local shell server and one-off commands."""

from __future__ import annotations

import argparse
import asyncio
import sys

import uvicorn

from emotion_wellbeing.config import get_settings
from emotion_wellbeing.logger import setup_logging
from emotion_wellbeing.models import PipelineState
from emotion_wellbeing.pipeline import create_pipeline
from emotion_wellbeing.presentation import build_screen, render_text
from emotion_wellbeing.storage.database import dispose_engines, init_db


async def _with_pipeline(action):
    settings = get_settings()
    await init_db(settings.database_url)
    pipeline = create_pipeline(settings)
    try:
        return await action(pipeline)
    finally:
        await pipeline.close()
        await dispose_engines()


async def _login(pipeline) -> int:
    await pipeline.auth.begin_login()
    return 0


async def _callback(pipeline, uri: str) -> int:
    outcome = await pipeline.auth.complete_login(uri)
    if outcome.success:
        print("Login successful!")
        return 0
    print(f"Login failed: {outcome.reason}", file=sys.stderr)
    return 1


async def _refresh(pipeline) -> int:
    result = await pipeline.run()
    print(render_text(build_screen(result)), end="")
    if result.login_required:
        print("No session stored. Run `emotion-wellbeing login` first.", file=sys.stderr)
    return 0 if result.state == PipelineState.READY else 1


async def _logout(pipeline) -> int:
    removed = await pipeline.auth.clear_session()
    print("Logged out." if removed else "No session stored.")
    return 0


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="emotion-wellbeing",
        description="Fitness, sleep and usage driven wellbeing prediction.",
    )
    sub = parser.add_subparsers(dest="command")

    # ── serve ─────────────────────────────────────────────────
    serve_parser = sub.add_parser("serve", help="Start the local dashboard server.")
    serve_parser.add_argument("--host", default=None)
    serve_parser.add_argument("--port", type=int, default=None)
    serve_parser.add_argument("--reload", action="store_true")

    # ── init-db ───────────────────────────────────────────────
    sub.add_parser("init-db", help="Create the local preference database.")

    # ── session ───────────────────────────────────────────────
    sub.add_parser("login", help="Open the provider login page in a browser.")
    callback_parser = sub.add_parser("callback", help="Handle a login redirect URI (deep link).")
    callback_parser.add_argument("uri")
    sub.add_parser("logout", help="Forget the stored session.")

    # ── refresh ───────────────────────────────────────────────
    sub.add_parser("refresh", help="Run one refresh cycle and print the dashboard.")

    args = parser.parse_args(argv)
    settings = get_settings()
    setup_logging(settings.log_level)

    if args.command == "serve":
        uvicorn.run(
            "emotion_wellbeing.api.server:app",
            host=args.host or settings.api_host,
            port=args.port or settings.api_port,
            reload=args.reload,
        )
    elif args.command == "init-db":
        asyncio.run(init_db(settings.database_url))
        print("Database tables created.")
    elif args.command == "login":
        sys.exit(asyncio.run(_with_pipeline(_login)))
    elif args.command == "callback":
        sys.exit(asyncio.run(_with_pipeline(lambda p: _callback(p, args.uri))))
    elif args.command == "logout":
        sys.exit(asyncio.run(_with_pipeline(_logout)))
    elif args.command == "refresh":
        sys.exit(asyncio.run(_with_pipeline(_refresh)))
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
