"""
Command line interface for the equipment WBS builder.

Usage:
    python -m wbs_builder generate <equipment_file> [options]
    python -m wbs_builder reconcile <existing_wbs_file> <equipment_file> [options]

Commands:
    generate    Build a new WBS from an equipment list
    reconcile   Add new equipment to a previously issued WBS

Options:
    --output-dir DIR        Export package directory (default: WBS_OUTPUT_DIR)
    --project-name NAME     Project root name (generate only)
    --new-only              Export only newly allocated nodes (reconcile only)
    --sheet NAME            Worksheet to read from .xlsx equipment lists
    --log-file              Also write a rotating log file under LOG_DIR
    --verbose               Debug logging
    --json                  Print the summary as JSON

Each run writes a dated export package:
    wbs_export.csv          P6 import (wbs_code, parent_wbs_code, wbs_name)
    wbs_structure.csv       Every node with its flags (reload for reconcile)
    category_summary.csv    Equipment count per category
    equipment_changes.csv   Added / modified / removed (reconcile only)
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

from schemas.validator import SchemaValidationError
from wbs_builder.config.settings import settings
from wbs_builder.exceptions import WbsBuilderError
from wbs_builder.extractors.file_extractor import equipment_extractor, wbs_tree_extractor
from wbs_builder.loaders.file_loader import FileLoader
from wbs_builder.pipeline import generate_wbs, process_equipment, reconcile_wbs
from wbs_builder.utils.logger import configure_logging
from wbs_builder.wbs.report import (
    EXPORT_COLUMNS,
    category_summary_rows,
    change_rows,
    export_rows,
    structure_rows,
    summary_text,
)

logger = logging.getLogger(__name__)

CHANGE_COLUMNS = [
    'change_type', 'equipment_number', 'description', 'commissioning_status',
    'subsystem', 'category', 'wbs_code', 'changes',
]


def setup_logging(verbose: bool = False, log_file: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )
    if log_file:
        configure_logging('wbs_builder')


def package_dir(output_dir) -> Path:
    """Dated export package directory under output_dir."""
    stamp = datetime.now().strftime(settings.EXPORT_DATE_FORMAT)
    return Path(output_dir or settings.OUTPUT_DATA_DIR) / f'{settings.EXPORT_PREFIX}{stamp}'


def read_rows(extractor, file_path, **kwargs):
    rows = extractor.extract(file_path=file_path, **kwargs)
    if not extractor.validate_extraction(rows):
        raise WbsBuilderError(f'{file_path}: missing required columns or no rows')
    return rows


def print_summary(result, args, written) -> None:
    if args.json:
        payload = {
            'files': [str(p) for p in written],
            'warnings': [w.message for w in result.warnings],
            'validation': {
                'is_valid': result.validation.is_valid,
                'errors': result.validation.errors,
                'statistics': result.validation.statistics,
            },
        }
        if hasattr(result, 'get_summary'):
            payload['summary'] = result.get_summary()
        else:
            payload['summary'] = result.get_statistics()
        print(json.dumps(payload, indent=2, default=str))
        return

    print(summary_text(result))
    print()
    for path in written:
        print(f"  wrote {path}")


def write_package(out_dir: Path, files) -> list:
    loader = FileLoader()
    written = []
    for name, rows, columns in files:
        if loader.load(rows, file_path=out_dir / name, columns=columns):
            written.append(out_dir / name)
    return written


def cmd_generate(args) -> int:
    """Generate a new WBS."""
    rows = read_rows(equipment_extractor(), args.equipment, sheet_name=args.sheet)
    processed = process_equipment(rows)
    result = generate_wbs(processed, project_name=args.project_name)

    out_dir = package_dir(args.output_dir)
    written = write_package(out_dir, [
        ('wbs_export.csv', export_rows(result.nodes), EXPORT_COLUMNS),
        ('wbs_structure.csv', structure_rows(result.nodes), None),
        ('category_summary.csv', category_summary_rows(processed.buckets), None),
    ])
    print_summary(result, args, written)
    return 0


def cmd_reconcile(args) -> int:
    """Reconcile an equipment list against an existing WBS."""
    existing = read_rows(wbs_tree_extractor(), args.existing_wbs)
    rows = read_rows(equipment_extractor(), args.equipment, sheet_name=args.sheet)
    processed = process_equipment(rows)
    result = reconcile_wbs(existing, processed)

    exported = result.new_wbs_items if args.new_only else result.integrated_tree
    out_dir = package_dir(args.output_dir)
    written = write_package(out_dir, [
        ('wbs_export.csv', export_rows(exported), EXPORT_COLUMNS),
        ('wbs_structure.csv', structure_rows(result.integrated_tree), None),
        ('equipment_changes.csv', change_rows(result), CHANGE_COLUMNS),
        ('category_summary.csv', category_summary_rows(processed.buckets), None),
    ])
    print_summary(result, args, written)
    return 0


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Debug logging',
    )
    common.add_argument(
        '--log-file',
        action='store_true',
        help='Also write a rotating log file under LOG_DIR',
    )
    common.add_argument(
        '--json',
        action='store_true',
        help='Print the summary as JSON',
    )
    common.add_argument(
        '--output-dir',
        type=Path,
        default=None,
        help='Export package directory (default: WBS_OUTPUT_DIR)',
    )
    common.add_argument(
        '--sheet',
        default=0,
        help='Worksheet to read from .xlsx equipment lists',
    )

    parser = argparse.ArgumentParser(
        prog='wbs_builder',
        description='Build and reconcile equipment commissioning WBS trees for Primavera P6',
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    generate = subparsers.add_parser('generate', parents=[common], help='Build a new WBS from an equipment list')
    generate.add_argument('equipment', help='Equipment list (.csv, .xlsx, .json)')
    generate.add_argument(
        '--project-name',
        default=None,
        help='Project root node name (default: WBS_PROJECT_NAME)',
    )

    reconcile = subparsers.add_parser('reconcile', parents=[common], help='Add new equipment to an issued WBS')
    reconcile.add_argument('existing_wbs', help='Existing WBS export (.csv, .xlsx, .json)')
    reconcile.add_argument('equipment', help='New equipment list (.csv, .xlsx, .json)')
    reconcile.add_argument(
        '--new-only',
        action='store_true',
        help='Export only newly allocated nodes',
    )
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose, args.log_file)

    missing = settings.validate_required_settings()
    if missing:
        print(f"ERROR: Missing settings: {', '.join(missing)}", file=sys.stderr)
        return 1

    commands = {
        'generate': cmd_generate,
        'reconcile': cmd_reconcile,
    }

    try:
        return commands[args.command](args)
    except FileNotFoundError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    except (WbsBuilderError, SchemaValidationError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
