"""
Command line entry point: viralcuts path/to/video.mp4
"""
import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from viralcuts.core.config import settings
from viralcuts.core.errors import PipelineError
from viralcuts.workers.clip_pipeline import build_default_pipeline

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="viralcuts",
        description="Cut a long video into short, non-overlapping viral clips."
    )
    parser.add_argument("video", help="Path of the video to process")
    parser.add_argument(
        "--output-dir",
        default=None,
        help=f"Folder for rendered clips (default: {settings.OUTPUT_DIR})"
    )
    parser.add_argument(
        "--compilation",
        action="store_true",
        help="Also join the rendered clips into one video"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    video_path = Path(args.video)
    if not video_path.is_file():
        print(f"Error: file not found: {video_path}", file=sys.stderr)
        return 1

    pipeline = build_default_pipeline(output_dir=args.output_dir)
    try:
        result = asyncio.run(pipeline.run(str(video_path), build_compilation=args.compilation))
    except PipelineError as e:
        logger.error(f"Processing failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"\n{'='*50}")
    print(f"Generated {len(result.clips)} clips from {video_path.name}")
    print(f"{'='*50}")
    for clip in result.clips:
        print(f"  [{clip.start:7.2f} - {clip.end:7.2f}] score={clip.score:g}  {clip.title}")
        print(f"      {clip.path}")
    for failed in result.failed_steps:
        print(f"  FAILED {failed.step} {failed.target}: {failed.error}")
    if result.compilation_path:
        print(f"Compilation: {result.compilation_path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
