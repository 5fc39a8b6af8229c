# wellforge/main.py
import argparse
import sys
from typing import List, Optional

from wellforge.config.settings import Settings
from wellforge.config.logging_utils import log_application_event
from wellforge.application.services.pipeline_service import WellPipeline
from wellforge.domain.exceptions import DomainException


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wellforge",
        description="Build an enriched per-well feature table from treatment, header and production files."
    )
    parser.add_argument("--data-dir", help="Directory holding the three input CSV files")
    parser.add_argument("--output", help="Destination of the enriched well table")
    parser.add_argument("--format", choices=["csv", "parquet"], help="Export format")
    parser.add_argument("--cluster", choices=["kmeans", "dbscan"], help="Cluster wells with this algorithm")
    parser.add_argument("--eps", type=float, help="DBSCAN distance threshold")
    parser.add_argument("--min-samples", type=int, help="DBSCAN minimum neighbours")
    parser.add_argument("--n-clusters", type=int, help="k-means cluster count")
    parser.add_argument("--fill", choices=["forward", "backward"], help="Fill gaps in monthly production per well")
    parser.add_argument("--duckdb", help="Also export into this DuckDB database")
    parser.add_argument("--plot-dir", help="Export a well map PNG into this directory")
    return parser


def settings_from_args(args: argparse.Namespace, base: Optional[Settings] = None) -> Settings:
    """Layer command-line overrides onto environment settings."""
    base = base or Settings()
    overrides = {
        "data_dir": args.data_dir,
        "output_path": args.output,
        "output_format": args.format,
        "dbscan_eps": args.eps,
        "dbscan_min_samples": args.min_samples,
        "n_clusters": args.n_clusters,
        "fill_direction": args.fill,
        "duckdb_path": args.duckdb,
        "plot_dir": args.plot_dir,
    }
    if args.cluster:
        overrides["clustering_enabled"] = True
        overrides["cluster_method"] = args.cluster
    values = base.model_dump()
    values.update({key: value for key, value in overrides.items() if value is not None})
    return Settings(**values)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = settings_from_args(args)
    try:
        result = WellPipeline(settings).run()
    except DomainException as e:
        print(f"wellforge: {type(e).__name__}: {e}", file=sys.stderr)
        return 1

    log_application_event("Run summary", result.model_dump_json(exclude={"output", "duckdb_output"}))
    print(result.message)
    return 0


if __name__ == "__main__":
    sys.exit(main())
