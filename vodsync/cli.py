"""Thin CLI entry point — builds a request and calls the engine or the bot."""

import argparse
import sys
from pathlib import Path

from vodsync import bot
from vodsync.config import load_config, timezone_name
from vodsync.engine import synchronize
from vodsync.logging_setup import setup_logging
from vodsync.models import ROI, SyncFound, SyncRequest, VodInfo
from vodsync.timestamps import parse_instant


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="vodsync",
        description="vodsync: locate a YouTube upload inside its Twitch VOD by reading the in-game clock.",
    )
    parser.add_argument("--config", "-c", type=Path, help="Path to a JSON config file")
    sub = parser.add_subparsers(dest="command")

    sync = sub.add_parser("sync", help="Synchronize a local clip against a VOD")
    sync.add_argument("clip", type=Path, help="Local video clip")
    sync.add_argument("--reference-instant", required=True, help="ISO-8601 time the broadcast went live")
    sync.add_argument("--vod-duration", required=True, help="VOD duration, e.g. 3h25m10s")
    sync.add_argument("--vod-url", default="", help="VOD URL (for the printed link)")
    sync.add_argument("--roi", type=ROI.parse, help="Clock region as x,y,w,h")
    sync.add_argument("--timezone", type=timezone_name, help="Timezone of the on-screen clock")
    sync.add_argument("--period", type=float, help="Seconds between sampled frames")

    sub.add_parser("run", help="Handle the newest upload of the configured playlist")

    serve = sub.add_parser("serve", help="Launch the web API")
    serve.add_argument("--port", type=int, default=8321, help="Port to listen on")
    serve.add_argument("--host", type=str, default="127.0.0.1", help="Host to bind to")

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    config = load_config(args.config)
    setup_logging(config.log_level)

    if args.command == "serve":
        from vodsync.web import create_app
        app = create_app(sync_config=config.sync)
        print(f"vodsync web API: http://{args.host}:{args.port}")
        app.run(host=args.host, port=args.port, debug=False)
        return

    if args.command == "run":
        video = bot.run(config)
        if video is None:
            print("No new upload to process.")
        else:
            print(f"Processed {video.id} ({video.title})")
        return

    if args.timezone:
        config.sync.timezone = args.timezone
    if args.period:
        config.sync.sample_period = args.period

    request = SyncRequest(
        clip=args.clip,
        reference_instant=parse_instant(args.reference_instant),
        vod=VodInfo(url=args.vod_url, published_at=args.reference_instant, duration=args.vod_duration),
        roi=args.roi,
    )

    def on_progress(stage: str, frac: float) -> None:
        print(f"  [{frac:3.0%}] {stage}")

    result = synchronize(request, config.sync, on_progress=on_progress)

    print()
    if isinstance(result, SyncFound):
        print(f"Found! Gameplay starts at {result.timestamp} ({result.offset_seconds}s)")
    else:
        print(f"Not found: {result.reason}", file=sys.stderr)
        sys.exit(2)
