"""
Map a business file's columns and print its metrics without starting the API.

Usage:
  PYTHONPATH=. poetry run python run_file.py \
    --input data/sales.csv \
    --catalog my_fields.yaml \
    --override "Amt=revenue" --override "Notes=" \
    --output results/sales_metrics.json
"""

import argparse
import json
import logging
from pathlib import Path
from typing import List, Optional, Tuple

from fieldmap.catalog import get_default_catalog, load_catalog
from fieldmap.config import get_config
from fieldmap.pipeline import MappingPipeline
from fieldmap.session import AnalyticsSession
from fieldmap.utils.file_reader import read_tabular


def parse_override(text: str) -> Tuple[str, Optional[str]]:
    """Parse "Column=field_id"; an empty field id unmaps the column."""
    if "=" not in text:
        raise argparse.ArgumentTypeError(f"Override must look like COLUMN=FIELD_ID, got: {text!r}")
    column, field_id = text.rsplit("=", 1)
    return column.strip(), field_id.strip() or None


def run_file(
    input_path: Path,
    catalog_path: Optional[Path] = None,
    overrides: Optional[List[Tuple[str, Optional[str]]]] = None,
) -> dict:
    """
    Load a file, apply overrides and return mappings and metrics.

    Args:
        input_path: Tabular file (CSV, TSV, Excel or JSON)
        catalog_path: Optional catalog YAML replacing the packaged one
        overrides: (column, field id or None) pairs applied in order

    Returns:
        Dictionary with dataset summary, mappings and metrics
    """
    catalog = load_catalog(catalog_path) if catalog_path else get_default_catalog()
    session = AnalyticsSession(pipeline=MappingPipeline(catalog=catalog))

    rows, columns = read_tabular(input_path.name, input_path.read_bytes())
    session.load(input_path.name, rows, columns)
    for column, field_id in overrides or []:
        session.override(column, field_id)

    dataset, metrics = session.snapshot()
    return {
        "dataset": dataset.to_dict(),
        "metrics": metrics.to_dict(),
    }


def main():
    parser = argparse.ArgumentParser(description="Map a business file's columns and compute its metrics.")
    parser.add_argument("--input", required=True, help="Path to CSV, TSV, Excel or JSON file")
    parser.add_argument("--catalog", help="Path to a field catalog YAML (defaults to the packaged catalog)")
    parser.add_argument(
        "--override",
        action="append",
        type=parse_override,
        default=[],
        help="Force a mapping, COLUMN=FIELD_ID (empty FIELD_ID unmaps). Repeatable.",
    )
    parser.add_argument("--output", help="Write JSON here instead of stdout")
    args = parser.parse_args()

    logging.basicConfig(level=getattr(logging, get_config().log_level.upper(), logging.INFO))

    input_path = Path(args.input)
    catalog_path = Path(args.catalog) if args.catalog else None

    if not input_path.exists():
        raise FileNotFoundError(f"Input file not found: {input_path}")
    if catalog_path and not catalog_path.exists():
        raise FileNotFoundError(f"Catalog file not found: {catalog_path}")

    result = run_file(input_path, catalog_path, args.override)
    text = json.dumps(result, indent=2, default=str)

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(exist_ok=True, parents=True)
        output_path.write_text(text, encoding="utf-8")
        print(f"Wrote {output_path}")
    else:
        print(text)


if __name__ == "__main__":
    main()
