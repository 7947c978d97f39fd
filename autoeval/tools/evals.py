import argparse
import json
from pathlib import Path
from typing import Any, List

from autoeval.config import EvalConfig, load_config
from autoeval.core.batch import discover_bundles, evaluate_batch
from autoeval.core.errors import ExportError
from autoeval.core.eval_schemas import EvaluationRecord, StatisticsReport
from autoeval.core.evaluator import ArtifactEvaluator
from autoeval.core.statistics import aggregate_statistics
from autoeval.infra.storage import EvaluationHistory, SqliteKeyValueStore
from autoeval.ops.export import export_document, export_jsonl, export_xlsx

# Exit codes reflect tool errors only; a "failure" grade still exits 0.
EXIT_OK = 0
EXIT_TOOL_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="autoeval",
        description="Grade generated artifact bundles: complete > good > insufficient > failure",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    # evaluate
    p_eval = sub.add_parser("evaluate", help="Evaluate a single bundle directory")
    p_eval.add_argument("path")
    p_eval.add_argument("--producer", type=str, default="", help="Override producer id")
    p_eval.add_argument("--json", action="store_true", help="Print the full record as JSON")
    p_eval.add_argument("--no_save", action="store_true", help="Do not append to history")

    # batch
    p_batch = sub.add_parser("batch", help="Evaluate every bundle under a directory")
    p_batch.add_argument("directory")
    p_batch.add_argument(
        "--out",
        type=str,
        default="",
        help="Output path. Default: <export_dir>/evaluations.<format>",
    )
    p_batch.add_argument("--format", choices=["jsonl", "json", "xlsx"], default="jsonl")
    p_batch.add_argument("--workers", type=int, default=None)
    p_batch.add_argument(
        "--no_details",
        action="store_true",
        help="Export summary fields only (no breakdowns/recommendations)",
    )
    p_batch.add_argument("--no_save", action="store_true", help="Do not append to history")

    # stats
    p_stats = sub.add_parser("stats", help="Producer statistics over saved history")
    p_stats.add_argument("--json", action="store_true")

    # history
    p_hist = sub.add_parser("history", help="List recent saved evaluations")
    p_hist.add_argument("--limit", type=int, default=20)

    return parser


def _print_json(obj: Any) -> None:
    print(json.dumps(obj, indent=2, ensure_ascii=False))


def _history(cfg: EvalConfig) -> EvaluationHistory:
    return EvaluationHistory(SqliteKeyValueStore(cfg.db_path))


def print_record(record: EvaluationRecord) -> None:
    print(f"Bundle: {record.bundle_id} (producer={record.producer_id}, version={record.version})")
    if record.error:
        print(f"ERROR: {record.error}")
    print(f"Grade: {record.grade.value}")
    print(f"Overall Score: {record.overall_score:.2f}")
    print(f"Completeness: {record.completeness_score:.2f}")
    print(f"Quality: {record.quality_score:.2f}")
    print(f"Confidence: {record.confidence:.2f}")
    print(f"Has Errors: {'Yes' if record.has_errors else 'No'}")

    if record.recommendations:
        print("\nRecommendations:")
        for i, rec in enumerate(record.recommendations, start=1):
            print(f"{i}. [{rec.priority}] {rec.suggestion}")


def print_statistics(report: StatisticsReport) -> None:
    if not report.has_data:
        print("No evaluation data available")
        return

    print(f"Evaluations: {report.total_evaluations} | producers: {report.unique_producers}")
    print(f"Average success rate: {report.average_success_rate:.3f}")
    print("Grades: " + ", ".join(f"{k}={v}" for k, v in report.grade_distribution.items()))
    print()
    for p in report.producers.values():
        print(
            f"{p.producer_id} | n={p.total_evaluations} | success={p.success_rate:.3f} "
            f"| overall={p.average_scores.overall:.3f} | last={p.last_activity}"
        )


def cmd_evaluate(args, cfg: EvalConfig) -> int:
    evaluator = ArtifactEvaluator(cfg.criteria)
    record = evaluator.evaluate_location(args.path, producer_id=args.producer or None)

    if not args.no_save:
        _history(cfg).append(record)

    if args.json:
        _print_json(record.model_dump(mode="json"))
    else:
        print_record(record)

    # The bundle could not be read/evaluated at all: that's a tool error, not a grade
    return EXIT_TOOL_ERROR if record.error else EXIT_OK


def cmd_batch(args, cfg: EvalConfig) -> int:
    locations = discover_bundles(args.directory)
    if not locations:
        print(f"No bundles found under {args.directory}")
        return EXIT_TOOL_ERROR

    evaluator = ArtifactEvaluator(cfg.criteria)
    workers = args.workers if args.workers is not None else cfg.max_workers
    records: List[EvaluationRecord] = evaluate_batch(locations, evaluator, max_workers=workers)

    if not args.no_save:
        _history(cfg).append_many(records)

    out_path = Path(args.out) if args.out else cfg.export_dir / f"evaluations.{args.format}"
    include_details = not args.no_details
    try:
        if args.format == "jsonl":
            export_jsonl(records, out_path, include_details=include_details)
        elif args.format == "json":
            export_document(records, out_path, include_details=include_details)
        else:
            export_xlsx(records, out_path)
    except ExportError as e:
        print(f"ERROR: {e}")
        return EXIT_TOOL_ERROR

    for r in records:
        print(f"{r.grade.value:<12} {r.overall_score:.2f}  {r.bundle_id}")
    print(str(out_path))
    return EXIT_OK


def cmd_stats(args, cfg: EvalConfig) -> int:
    report = aggregate_statistics(_history(cfg).load_all())
    if args.json:
        _print_json(report.model_dump(mode="json"))
    else:
        print_statistics(report)
    return EXIT_OK


def cmd_history(args, cfg: EvalConfig) -> int:
    for r in _history(cfg).recent(limit=args.limit):
        print(f"{r.evaluated_at} | {r.grade.value} | {r.overall_score:.2f} | {r.producer_id}")
        print(f"  {r.location}")
    return EXIT_OK


def dispatch(args, cfg: EvalConfig) -> int:
    if args.cmd == "evaluate":
        return cmd_evaluate(args, cfg)
    if args.cmd == "batch":
        return cmd_batch(args, cfg)
    if args.cmd == "stats":
        return cmd_stats(args, cfg)
    if args.cmd == "history":
        return cmd_history(args, cfg)

    print(f"Unknown command: {args.cmd}")
    return EXIT_TOOL_ERROR


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    cfg = load_config()
    try:
        cfg.criteria
    except ValueError as e:
        print(f"ERROR: {e}")
        raise SystemExit(EXIT_TOOL_ERROR)

    raise SystemExit(dispatch(args, cfg))


if __name__ == "__main__":
    main()
