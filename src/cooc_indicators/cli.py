"""Command line interface for cooccurrence indicator scoring."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .analysis.cooccurrence import IndicatorResult, compute_indicators, top_indicators
from .analysis.frequency import compare, rank_keys
from .common.config import IndicatorConfig
from .utils.io import load_frequencies, load_interactions, utcnow_iso, write_csv, write_json
from .utils.sql import connect_sqlite, ensure_indicator_tables, replace_rows, upsert_rows
from .utils.stats import llr, normal_tail

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
INDICATOR_HEADER = ("item", "other", "rank", "score", "llr", "p_value", "cooccurrences")
logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)


def _resolve_config(args: argparse.Namespace) -> IndicatorConfig:
    config = IndicatorConfig.from_env(args.env_file)
    return config.with_overrides(
        row_cap=getattr(args, "row_cap", None),
        item_cap=getattr(args, "item_cap", None),
        top_k=getattr(args, "top_k", None),
        min_score=getattr(args, "min_score", None),
        seed=args.seed,
    )


def _pair_llr(result: IndicatorResult, item: int, other: int) -> float:
    joint = float(result.cooccurrence[item, other])
    only_item = result.item_counts[item] - joint
    only_other = result.item_counts[other] - joint
    return llr(joint, only_item, only_other, result.observations - joint - only_item - only_other)


def _run_indicators(args: argparse.Namespace) -> int:
    config = _resolve_config(args)
    interactions = load_interactions(Path(args.input), delimiter=args.delimiter)

    # the loaded matrix is private to this command, so skip the defensive copy
    result = compute_indicators(
        interactions.matrix,
        config.item_cap,
        config.row_cap,
        copy=False,
        rng=config.seed,
    )
    ranked = top_indicators(
        result.scores,
        config.top_k,
        min_score=config.min_score,
        cooccurrence=result.cooccurrence,
    )

    timestamp = utcnow_iso()
    records: list[dict[str, object]] = []
    for item, entries in ranked.items():
        for rank, entry in enumerate(entries, start=1):
            records.append(
                {
                    "item": interactions.items[item],
                    "other": interactions.items[entry.other],
                    "rank": rank,
                    "score": round(entry.score, 6),
                    "llr": round(_pair_llr(result, item, entry.other), 6),
                    "p_value": normal_tail(entry.score),
                    "cooccurrences": entry.cooccurrences,
                    "updated_at": timestamp,
                }
            )

    out_path = Path(args.out)
    write_csv(out_path, INDICATOR_HEADER, ([record[col] for col in INDICATOR_HEADER] for record in records))

    if args.db:
        conn = connect_sqlite(Path(args.db).expanduser().resolve())
        try:
            ensure_indicator_tables(conn)
            replace_rows(conn, "indicator_scores", [{k: v for k, v in r.items() if k != "p_value"} for r in records])
            upsert_rows(
                conn,
                "indicator_runs",
                [
                    {
                        "source": str(args.input),
                        "observations": result.observations,
                        "items": len(interactions.items),
                        "pairs": result.scores.nnz // 2,
                        "row_cap": config.row_cap,
                        "item_cap": config.item_cap,
                        "seed": config.seed,
                        "created_at": timestamp,
                    }
                ],
            )
        finally:
            conn.close()

    print(
        f"Scored {result.scores.nnz // 2} item pairs across {result.observations} observations; "
        f"wrote {len(records)} indicators for {len(ranked)} items to {out_path}"
    )
    return len(records)


def _run_compare(args: argparse.Namespace) -> int:
    config = _resolve_config(args)
    a = load_frequencies(Path(args.a))
    b = load_frequencies(Path(args.b))
    ranked = rank_keys(compare(a, b), config.top_k)

    if args.out:
        write_json(
            Path(args.out),
            {
                "generated_at": utcnow_iso(),
                "a": str(args.a),
                "b": str(args.b),
                "scores": {key: score for key, score in ranked},
            },
        )
        print(f"Wrote {len(ranked)} scores to {args.out}")
    else:
        for key, score in ranked:
            print(f"{key}\t{score:.4f}")
    return len(ranked)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="coocind",
        description="Log-likelihood ratio cooccurrence indicators",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for down-sampling")
    parser.add_argument("--env-file", default=None, help="Optional .env file with COOC_* settings")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    ind = subparsers.add_parser("indicators", help="Score item cooccurrence from interactions")
    ind.add_argument("--input", required=True, help="CSV of observation,item[,count] rows")
    ind.add_argument("--out", required=True, help="CSV output path for ranked indicators")
    ind.add_argument("--delimiter", default=",", help="Input field delimiter")
    ind.add_argument("--row-cap", type=int, default=None, help="Max items kept per observation (<=0 disables)")
    ind.add_argument("--item-cap", type=int, default=None, help="Max observations kept per item (<=0 disables)")
    ind.add_argument("--top-k", type=int, default=None, help="Indicators kept per item (<=0 keeps all)")
    ind.add_argument("--min-score", type=float, default=None, help="Minimum signed score to keep")
    ind.add_argument("--db", default=None, help="Optional SQLite database to upsert scores into")
    ind.set_defaults(handler=_run_indicators)

    cmp_parser = subparsers.add_parser("compare", help="Compare two JSON frequency tables")
    cmp_parser.add_argument("--a", required=True, help="JSON object of counts")
    cmp_parser.add_argument("--b", required=True, help="JSON object of counts to compare against")
    cmp_parser.add_argument("--top-k", type=int, default=None, help="Keys to report (<=0 keeps all)")
    cmp_parser.add_argument("--out", default=None, help="Optional JSON output path")
    cmp_parser.set_defaults(handler=_run_compare)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:  # pragma: no cover - delegated to argparse
        return exc.code

    _configure_logging(args.verbose)

    try:
        args.handler(args)
    except (FileNotFoundError, OSError, ValueError) as error:
        logger.error(f"Command failed. Reason: {str(error)}", exc_info=False, extra={"error": str(error)})
        return 2

    return 0


if __name__ == "__main__":
    sys.exit(main())
