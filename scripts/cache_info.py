import argparse
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from campaign_monitor.cache import DEFAULT_TTL, FileCache
from core.logging import setup_logging


def parse_args(argv=None):
    """Parses command-line arguments."""
    parser = argparse.ArgumentParser(description="Show the entries stored in a Campaign Monitor cache directory.")
    parser.add_argument(
        "location",
        type=Path,
        help="Cache directory to inspect.",
    )
    parser.add_argument(
        "--ttl",
        type=int,
        default=DEFAULT_TTL,
        help=f"Validity window in seconds used to flag expired entries. Default: {DEFAULT_TTL}",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the summary as JSON.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging."
    )
    return parser.parse_args(argv)

def main(argv=None):
    """Main execution function."""
    args = parse_args(argv)
    setup_logging("DEBUG" if args.verbose else "WARNING")

    if not args.location.is_dir():
        print(f"Cache directory '{args.location}' not found. Nothing to do.")
        return 1

    info = FileCache(args.location, args.ttl).info()
    if args.json:
        print(json.dumps(info, indent=2))
        return 0

    print(f"--- Cache: {info['location']} (ttl {info['ttl']}s) ---")
    for entry in info["files"]:
        if entry.get("error"):
            print(f"  - {entry['name']}  UNREADABLE")
            continue
        state = "expired" if entry["expired"] else "live"
        print(f"  - {entry['name']}  {entry['method']}  {entry['age_seconds']}s  {state}")
    print(f"{len(info['files'])} entr{'y' if len(info['files']) == 1 else 'ies'}")
    return 0

if __name__ == "__main__":
    sys.exit(main())
