"""Command-line interface for classifying a lineup portfolio against a reference pack."""

from __future__ import annotations

import argparse
import csv
import json
import logging
from pathlib import Path

from slatesavvy.analysis import build_report
from slatesavvy.config_loader import ContestProfile
from slatesavvy.errors import SlateSavvyError
from slatesavvy.ingest import decode_payload
from slatesavvy.pool import ContestExportError, export_lineups_to_csv
from slatesavvy.session import (
    SessionContext,
    autoload_reference_pack,
    computed_lineups,
    contest_state,
    load_reference_pack,
    set_contest_input,
    slate_stats,
    upload_beliefs,
    upload_lineups,
)


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Classify DFS lineups against a pipeline reference pack")
    parser.add_argument("pack", type=Path, nargs="?", help="Path to pipeline_YYYY-MM-DD.json")
    parser.add_argument(
        "--autoload-dir",
        type=Path,
        default=None,
        help="Directory to search for today's pipeline pack when no pack path is given",
    )
    parser.add_argument("--date", action="append", default=[], help="Pack date (YYYY-MM-DD) to try when auto-loading")
    parser.add_argument("--lineups", type=Path, default=None, help="Optimizer export or user lineup CSV")
    parser.add_argument("--set-name", default="uploaded", help="Set label for uploaded lineups")
    parser.add_argument("--beliefs", type=Path, default=None, help="Projections CSV used as the belief profile")
    parser.add_argument("--contest", type=Path, default=None, help="Contest parameters JSON")
    parser.add_argument("--save-contest", type=Path, default=None, help="Write the effective contest JSON here")
    parser.add_argument("--output", type=Path, default=Path("classified_lineups.csv"), help="Output CSV path")
    parser.add_argument("--report", type=Path, default=None, help="Optional path to write the portfolio report JSON")
    parser.add_argument("--dk-export", type=Path, default=None, help="Optional DraftKings upload CSV path")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log load details")
    return parser.parse_args()


def _read(path: Path) -> str:
    return decode_payload(path.read_bytes())


def main() -> None:
    args = _parse_args()
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    session = SessionContext()
    try:
        if args.pack is not None:
            result = load_reference_pack(session, _read(args.pack), location=str(args.pack))
        elif args.autoload_dir is not None:
            result = autoload_reference_pack(session, str(args.autoload_dir), args.date or None)
        else:
            raise SystemExit("a pack path or --autoload-dir is required")
        if result is not None:
            print(
                f"Loaded {len(result.snapshot.players)} players and {result.lineup_count} "
                f"{result.lineup_source} lineups from {result.location}"
            )

        if args.contest:
            set_contest_input(session, ContestProfile.load(args.contest).contest)
        if args.beliefs:
            snapshot = upload_beliefs(session, _read(args.beliefs), name=args.beliefs.name)
            print(f"Belief profile {snapshot.label}: {len(snapshot.players)} players")
        if args.lineups:
            upload = upload_lineups(session, _read(args.lineups), set_name=args.set_name)
            print(
                f"Read {upload.lineup_count} lineups as {upload.format.value} "
                f"({upload.incomplete_count} incomplete)"
            )
    except (SlateSavvyError, ValueError, OSError) as exc:
        raise SystemExit(f"error: {exc}") from exc

    if args.save_contest:
        ContestProfile(session.contest_input).save(args.save_contest)
        print(f"Saved contest parameters to {args.save_contest}")

    lineups = computed_lineups(session)
    with args.output.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow([
            "lineup_id",
            "set",
            "raw_label",
            "player_ids",
            "missing",
            "salary",
            "projection",
            "ownership",
            "ceiling",
            "sim_roi",
            "viability",
            "alignment",
            "upside",
        ])
        for lineup in lineups:
            signals = lineup.signals
            writer.writerow([
                lineup.lineup_id,
                lineup.set_name,
                lineup.raw_label or "",
                " ".join(lineup.player_ids),
                lineup.missing_count,
                lineup.total_salary,
                lineup.total_projection,
                lineup.total_ownership,
                lineup.total_ceiling,
                "" if lineup.sim_roi is None else lineup.sim_roi,
                signals.viability.label if signals else "",
                signals.alignment.label if signals else "",
                signals.upside.label if signals else "",
            ])
    print(f"Wrote {len(lineups)} lineups to {args.output}")

    if args.dk_export:
        complete = [lineup for lineup in lineups if lineup.is_complete]
        try:
            args.dk_export.write_text(export_lineups_to_csv(complete), encoding="utf-8")
        except ContestExportError as exc:
            raise SystemExit(f"error: {exc}") from exc
        print(f"Wrote {len(complete)} lineups to {args.dk_export}")

    stats = slate_stats(session)
    if args.report:
        payload = {
            "report": build_report(lineups, contest_state(session)).model_dump(mode="json"),
            "stats": stats.model_dump(mode="json"),
        }
        args.report.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        print(f"Wrote report to {args.report}")
    for warning in stats.warnings:
        print(f"Warning: {warning}")


if __name__ == "__main__":
    main()
