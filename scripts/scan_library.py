#!/usr/bin/env python3
"""Detect the tempo of every audio file under a directory.

Usage:
    uv run python scripts/scan_library.py music/                 # scan, print table
    uv run python scripts/scan_library.py music/ --workers 8     # parallel decode + analysis
    uv run python scripts/scan_library.py music/ --limit 10      # smoke test
    uv run python scripts/scan_library.py music/ --output bpm.json
"""

import argparse
import json
import logging
import sys
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

from tqdm import tqdm

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from tempometer.analysis.engine import TempoEngine
from tempometer.audio.loader import SUPPORTED_EXTENSIONS, DecodeError
from tempometer.config import settings

logging.basicConfig(level=logging.WARNING, format="%(name)s %(levelname)s: %(message)s")


def find_audio_files(root: Path) -> list[Path]:
    """All supported audio files under *root*, sorted by path."""
    return sorted(
        p for p in root.rglob("*")
        if p.is_file() and p.suffix.lower() in SUPPORTED_EXTENSIONS
    )


def scan_file(engine: TempoEngine, path: Path) -> dict:
    """Decode and analyze one file. Decode failures are reported, not raised."""
    t0 = time.time()
    try:
        result = engine.analyze_file(str(path))
    except DecodeError as e:
        return {"file": str(path), "bpm": None, "error": str(e), "elapsed": time.time() - t0}
    return {
        "file": str(path),
        "bpm": result.bpm,
        "raw_bpm": result.raw_bpm,
        "duration": round(result.duration, 2),
        "onsets": len(result.onsets),
        "elapsed": round(time.time() - t0, 3),
    }


def main():
    parser = argparse.ArgumentParser(description="Detect BPM for a music library")
    parser.add_argument("directory", type=Path, help="Directory to scan")
    parser.add_argument("--workers", type=int, default=settings.max_workers,
                        help=f"Parallel workers (default {settings.max_workers})")
    parser.add_argument("--limit", type=int, default=0, help="Only scan the first N files")
    parser.add_argument("--output", type=Path, default=None, help="Write results as JSON")
    args = parser.parse_args()

    if not args.directory.is_dir():
        parser.error(f"Not a directory: {args.directory}")

    files = find_audio_files(args.directory)
    if args.limit:
        files = files[:args.limit]
    if not files:
        print("No audio files found.")
        return

    engine = TempoEngine(settings)
    results: list[dict] = []
    with ThreadPoolExecutor(max_workers=max(1, args.workers)) as pool:
        futures = [pool.submit(scan_file, engine, p) for p in files]
        for future in tqdm(as_completed(futures), total=len(futures), desc="Scan", unit="file"):
            results.append(future.result())

    results.sort(key=lambda r: r["file"])
    failed = [r for r in results if r["bpm"] is None]
    undetected = [r for r in results if r["bpm"] == 0]

    print()
    for r in results:
        name = Path(r["file"]).relative_to(args.directory)
        if r["bpm"] is None:
            print(f"  ERR  {name}: {r['error']}")
        elif r["bpm"] == 0:
            print(f"    -  {name}")
        else:
            print(f"  {r['bpm']:3d}  {name}")

    print(f"\n{len(results)} files, {len(undetected)} without tempo, {len(failed)} failed to decode")

    if args.output:
        args.output.write_text(json.dumps(results, indent=2))
        print(f"Results written to {args.output}")


if __name__ == "__main__":
    main()
