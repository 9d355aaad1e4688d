"""Command-line quality gate for subtitle files.

WHY: Editors and CI jobs want to check an SRT or VTT file without writing
Python. This exposes run_quality_gate() as a command whose exit code is the
verdict.

HOW: Parses the subtitle file with timecodes.parse_cues(), keeping each
cue's display lines so line rules see the file as written, optionally loads
token logprobs from a JSON file, runs the gate, and prints either the
human-readable summary and report or a JSON document.

RULES:
- Usage:
    python -m subtitle_rules.cli subs.srt --threshold 70 --language en
    python -m subtitle_rules.cli subs.vtt --logprobs logprobs.json --json
- Exit codes: 0 = gate passed, 1 = gate failed, 2 = unreadable input.
- The logprobs file is a list of {"segment_index": n, "tokens":
  [{"token": str, "logprob": float}, ...]} objects ("segmentIndex" accepted).
- Result text goes to stdout; errors go to stderr.
"""

import argparse
import json
import sys
from typing import List, Optional

from .gate import DEFAULT_THRESHOLD, format_gate_summary, run_quality_gate
from .models import SegmentLogprobs, TokenLogprob
from .quality import report_to_dict
from .timecodes import parse_cues


def load_logprobs(path: str) -> List[SegmentLogprobs]:
    """Read per-segment token logprobs from a JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError("Logprobs file must contain a JSON list")

    result = []
    for entry in data:
        if not isinstance(entry, dict):
            raise ValueError("Logprobs entries must be objects, got {!r}".format(entry))
        index = entry.get("segment_index", entry.get("segmentIndex"))
        if index is None:
            raise ValueError("Logprobs entry is missing segment_index")
        tokens = []
        for t in entry.get("tokens", []):
            if not isinstance(t, dict) or not isinstance(t.get("logprob"), (int, float)):
                raise ValueError("Token entries need a numeric logprob, got {!r}".format(t))
            tokens.append(TokenLogprob(token=str(t.get("token", "")), logprob=float(t["logprob"])))
        result.append(SegmentLogprobs(segment_index=int(index), tokens=tokens))
    return result


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m subtitle_rules.cli",
        description="Score an SRT/VTT subtitle file and fail below a threshold.",
    )
    parser.add_argument("file", help="Path to an .srt or .vtt file")
    parser.add_argument(
        "--threshold", type=float, default=DEFAULT_THRESHOLD,
        help="Minimum overall score to pass (default: %(default)s)",
    )
    parser.add_argument("--language", default="en", help="ISO 639-1 language code (default: en)")
    parser.add_argument("--logprobs", default=None, help="Optional JSON file with token logprobs")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        with open(args.file, "r", encoding="utf-8-sig") as f:
            segments = parse_cues(f.read(), join="\n")
        logprobs = load_logprobs(args.logprobs) if args.logprobs else None
    except (OSError, ValueError, KeyError, TypeError) as e:
        print("Error: {}".format(e), file=sys.stderr)
        return 2

    result = run_quality_gate(segments, args.threshold, args.language, logprobs)

    if args.json:
        payload = {
            "passed": result.passed,
            "score": result.score,
            "threshold": result.threshold,
            "quality_level": result.quality_level,
            "segments_below_threshold": result.segments_below_threshold,
            "total_segments": result.total_segments,
            "category_failures": [
                {"category": f.category, "detail": f.detail} for f in result.category_failures
            ],
            "report": report_to_dict(result.full_report),
        }
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        print(format_gate_summary(result))
        print()
        print(result.report)

    return 0 if result.passed else 1


if __name__ == "__main__":
    sys.exit(main())
