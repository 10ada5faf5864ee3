"""Command line entry point: download product photos or show run status."""

import argparse
import logging
import sys
from typing import List, Optional

from .batch import BatchDriver, CheckpointStore
from .config import RENDERERS, DownloaderConfig
from .errors import PhotoFetcherError
from .logging import LoggerConfig, ProgressTracker
from .manifest import load_manifest

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="photo-fetcher",
        description="Download product photos listed in a JSON manifest, resuming where the last run stopped."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_paths(sub):
        sub.add_argument("--manifest", dest="manifest_path",
                         help="JSON manifest with ManufacturerProductNumber and PhotoUrl records")
        sub.add_argument("--output", dest="output_folder",
                         help="Folder for images, download_state.json and failed.json")

    download = subparsers.add_parser("download", help="Run (or resume) a download")
    add_paths(download)
    download.add_argument("--renderer", choices=RENDERERS, default=None,
                          help="Rendering backend (default: playwright)")
    download.add_argument("--headed", dest="headless", action="store_false", default=None,
                          help="Show the browser window")
    download.add_argument("--user-agent", default=None)
    download.add_argument("--navigation-timeout-ms", type=int, default=None)
    download.add_argument("--checkpoint-interval", type=int, default=None,
                          help="Save progress every N records (default: 10)")
    download.add_argument("--limit", type=int, default=None,
                          help="Process at most N records from the resume point")
    download.add_argument("--log-level", default=None)
    download.add_argument("--log-dir", default=None)
    download.add_argument("--json-logs", action="store_true", default=None)

    status = subparsers.add_parser("status", help="Show stored progress for an output folder")
    add_paths(status)

    return parser


def run_download(config: DownloaderConfig) -> int:
    LoggerConfig(log_dir=config.log_dir).setup(
        level=config.log_level,
        json_output=config.json_logs
    )

    driver = BatchDriver(
        session_factory=config.create_session,
        checkpoint_interval=config.checkpoint_interval
    )
    result = driver.run(config.manifest_path, config.output_folder, limit=config.limit)

    return 0 if result['status'] == 'completed' else 1


def run_status(config: DownloaderConfig) -> int:
    try:
        records = load_manifest(config.manifest_path)
        progress = CheckpointStore(config.output_folder).get_progress(len(records))
    except (PhotoFetcherError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    tracker = ProgressTracker(total=progress['total'], start=progress['records_handled'])
    print(f"Resume index:  {progress['resume_index']}")
    print(f"Progress:      {tracker.get_progress_bar()}")
    print(f"Failed items:  {progress['failed']}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    options = {k: v for k, v in vars(args).items() if k != "command"}

    try:
        config = DownloaderConfig.from_env(**options)
        config.validate()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    if args.command == "status":
        return run_status(config)
    return run_download(config)


if __name__ == "__main__":
    sys.exit(main())
