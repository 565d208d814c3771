# -*- coding: utf-8 -*-
import argparse, json, sys

from app import config
from app.coveo_client import ExportError
from app.exporter import export_results, run_export, save_csv
from app.models import CapturedRequest
from app.table import FIXED_HEADER

def load_request(path):
    """
    Read a captured request saved as JSON: {"url": ..., "headers": {...}, "body": "..."}.
    """
    with open(path, "r", encoding="utf-8") as f:
        return CapturedRequest.model_validate(json.load(f))

def load_results(path):
    """Read a saved search response and return its `results` array."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    results = data.get("results") if isinstance(data, dict) else None
    if not isinstance(results, list):
        raise ExportError("No results in response")
    return results

def main(argv=None):
    p = argparse.ArgumentParser(description="Export search results with parsed ranking debug info to CSV")
    src = p.add_mutually_exclusive_group(required=True)
    src.add_argument("--request", help="JSON file with a captured search request to replay")
    src.add_argument("--from-json", dest="from_json", help="Saved search response (JSON) to export offline")
    p.add_argument("--count", type=int, default=config.default_count(), help="Records to fetch")
    p.add_argument("--out-dir", dest="out_dir", default=config.export_dir())
    args = p.parse_args(argv)

    if args.request:
        captured = load_request(args.request)
        result = run_export(captured, args.count)
    else:
        result = export_results(load_results(args.from_json))

    path = save_csv(result.csv_text, args.out_dir, filename=result.filename)
    dynamic = len(result.columns) - len(FIXED_HEADER)

    print(f"Wrote CSV -> {path}")
    print(f"Rows exported: {result.row_count}")
    print(f"Columns: {len(result.columns)} ({dynamic} discovered from ranking info)")
    return path

if __name__ == "__main__":
    try:
        main()
    except (ExportError, OSError, ValueError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)
