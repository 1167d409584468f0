#!/usr/bin/env python3

import argparse
import asyncio
import json
import logging
import sys

from rich.progress import BarColumn, Progress, TaskProgressColumn, TimeRemainingColumn

from . import __version__
from .config import DEFAULT_BATCH_SIZE, DEFAULT_DATA_DIR
from .dataset import CollectOptions, collect_dataset, load_collect_options_from_yaml
from .errors import DecodeError, ZipClassError
from .logger import init_logging


def add_common_args(parser):
    """Add dataset arguments shared by every command."""
    parser.add_argument(
        "url",
        nargs="?",
        help="Dataset zip: file:///path.zip, https://... or hf://[datasets/]org/repo/file.zip",
    )
    parser.add_argument(
        "--data-dir",
        metavar="PATH",
        help=f"Working directory for download and extraction (default: {DEFAULT_DATA_DIR})",
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="YAML file with collect options; command line values take precedence",
    )
    parser.add_argument(
        "--shuffle",
        action="store_const",
        const=True,
        dest="shuffle_before_indexing",
        help="Shuffle discovered images before labels are assigned",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Random seed for --shuffle",
    )
    parser.add_argument(
        "--strict",
        action="store_const",
        const="strict",
        dest="metadata_validation",
        help="Report the real test size and channel count in metadata",
    )
    parser.add_argument(
        "--keep-archive",
        action="store_const",
        const=True,
        dest="keep_local_archive",
        help="Do not delete a file:// archive after extraction",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug messages",
    )


def build_options(args) -> CollectOptions:
    overrides = {
        "url": args.url,
        "data_dir": args.data_dir,
        "shuffle_before_indexing": args.shuffle_before_indexing,
        "seed": args.seed,
        "metadata_validation": args.metadata_validation,
        "keep_local_archive": args.keep_local_archive,
    }
    if args.config:
        return load_collect_options_from_yaml(args.config, overrides)
    return CollectOptions.from_dict(
        {key: value for key, value in overrides.items() if value is not None}
    )


def command_meta(args):
    """Print dataset metadata as JSON."""
    try:
        options = build_options(args)
        source = asyncio.run(collect_dataset(options))
        print(json.dumps(source.get_meta().to_dict(), indent=2))
        return 0

    except KeyboardInterrupt:
        print("\nCollection interrupted by user")
        return 130
    except ZipClassError as e:
        print(f"\nCollection failed: {e}")
        return 1


async def _decode_all(source, batch_size: int):
    counts = {}
    failures = []

    with Progress(
        "[progress.description]{task.description}",
        BarColumn(),
        TaskProgressColumn(),
        TimeRemainingColumn(),
    ) as progress:
        for cursor in (source.open_cursor("train"), source.open_cursor("test")):
            task_id = progress.add_task(f"[cyan]{cursor.split}", total=len(cursor))
            decoded = 0
            while cursor.remaining:
                position = cursor.offset
                try:
                    batch = await cursor.next_batch(min(batch_size, cursor.remaining))
                except DecodeError:
                    # Re-read the batch one image at a time to find the bad files
                    cursor.seek(position)
                    batch = []
                    for _ in range(min(batch_size, cursor.remaining)):
                        try:
                            batch.append(await cursor.next())
                        except DecodeError as e:
                            failures.append(e)
                batch = [sample for sample in batch if sample is not None]
                decoded += len(batch)
                progress.update(task_id, completed=cursor.offset)
            counts[cursor.split] = decoded

    return counts, failures


def command_verify(args):
    """Decode every train and test image to check the archive."""
    if args.batch_size < 1:
        print(f"Error: --batch-size must be at least 1, got {args.batch_size}")
        return 1

    try:
        options = build_options(args)
        source = asyncio.run(collect_dataset(options))
        meta = source.get_meta()

        print(json.dumps(meta.to_dict(), indent=2))
        print("-" * 60)

        counts, failures = asyncio.run(_decode_all(source, args.batch_size))

        for split, count in counts.items():
            print(f"  {split}: {count} images decoded")

        if failures:
            print(f"\n❌ {len(failures)} images failed to decode")
            for failure in failures[:10]:
                print(f"  {failure}")
            if len(failures) > 10:
                print(f"  ... and {len(failures) - 10} more failures")
            return 1

        print("\n✅ All images decoded successfully")
        return 0

    except KeyboardInterrupt:
        print("\nVerification interrupted by user")
        return 130
    except ZipClassError as e:
        print(f"\nVerification failed: {e}")
        return 1


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="zipclass",
        description="zipclass - zipped image classification datasets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available zipclass commands",
        dest="command",
        required=True,
        help="Command to execute",
    )

    # ========== META COMMAND ==========
    meta_parser = subparsers.add_parser(
        "meta",
        help="Collect a dataset and print its metadata",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Inspect a local archive
  zipclass meta file:///data/flowers.zip --data-dir /tmp/flowers

  # Real test count and channels
  zipclass meta https://example.com/flowers.zip --strict
        """,
    )
    add_common_args(meta_parser)
    meta_parser.set_defaults(func=command_meta)

    # ========== VERIFY COMMAND ==========
    verify_parser = subparsers.add_parser(
        "verify",
        help="Decode every image in the dataset",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  zipclass verify file:///data/flowers.zip --batch-size 64
  zipclass verify --config flowers.yaml
        """,
    )
    add_common_args(verify_parser)
    verify_parser.add_argument(
        "--batch-size",
        type=int,
        default=DEFAULT_BATCH_SIZE,
        help=f"Images decoded concurrently (default: {DEFAULT_BATCH_SIZE})",
    )
    verify_parser.set_defaults(func=command_verify)

    args = parser.parse_args(argv)
    init_logging(logging.DEBUG if args.verbose else logging.INFO)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
