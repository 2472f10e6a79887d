#!/usr/bin/env python3
"""
ICDC Invoice Parser - Main Entry Point.

Parses ICDC excise invoices (text-layer PDFs or extracted .txt files)
into line items, quantities, financial fields and brand matches.

Usage:
    Command Line:
        python main.py --input ICDC_JUNE.pdf --catalog data/catalog.json
        python main.py --input ./invoices/ --output ./outputs/ --excel --json
        python main.py --input ./invoices/ --evaluate --ground-truth data/ground_truth.json

    Python:
        from main import run_parsing
        results = run_parsing("invoices/", catalog_path="data/catalog.json")

Author: ML Engineering Team
Version: 1.0.0
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

# Import project modules
from config import ConfigurationManager, get_config
from src.utils.logger import LOGGER_NAMESPACE, setup_logger_from_config, get_logger
from src.utils.exceptions import InvoiceParsingError


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="ICDC Excise Invoice Parser",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    Parse a single invoice:
        python main.py --input ICDC_JUNE.pdf --catalog data/catalog.json

    Parse a directory with exports:
        python main.py --input ./invoices/ --output ./outputs/ --excel --json

    With evaluation:
        python main.py --input ./invoices/ --evaluate --ground-truth data/ground_truth.json
        """
    )

    # Input/Output arguments
    parser.add_argument(
        "--input", "-i",
        type=str,
        required=True,
        help="Invoice file (.pdf/.txt) or directory of invoices"
    )

    parser.add_argument(
        "--catalog",
        type=str,
        default=None,
        help="Master brand catalog snapshot (JSON)"
    )

    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Output directory (default: paths.output_dir)"
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to custom configuration file"
    )

    # Export options
    parser.add_argument(
        "--excel",
        action="store_true",
        help="Write an Excel workbook of the results"
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Write JSON diagnostics (raw text, line roles, trace) per invoice"
    )

    # Evaluation options
    parser.add_argument(
        "--evaluate",
        action="store_true",
        help="Evaluate results against ground truth"
    )

    parser.add_argument(
        "--ground-truth", "-gt",
        type=str,
        default=None,
        help="Path to ground truth file for evaluation"
    )

    # Logging options
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only print errors"
    )

    return parser.parse_args(argv)


def initialize_system(args: argparse.Namespace) -> ConfigurationManager:
    """
    Initialize configuration and logging.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Initialized configuration manager.
    """
    config = ConfigurationManager(args.config)
    logger = setup_logger_from_config()

    if args.debug:
        logging.getLogger(LOGGER_NAMESPACE).setLevel(logging.DEBUG)
    elif args.quiet:
        logging.getLogger(LOGGER_NAMESPACE).setLevel(logging.ERROR)

    logger.info("=" * 60)
    logger.info("ICDC INVOICE PARSER")
    logger.info("=" * 60)
    logger.info(f"Version: {config.get('project.version', '1.0.0')}")
    logger.info(f"Input: {args.input}")

    return config


def run_parsing(
    input_path: str,
    catalog_path: Optional[str] = None,
    output_dir: Optional[str] = None,
    excel: bool = False,
    diagnostics: bool = False,
    evaluate: bool = False,
    ground_truth_path: Optional[str] = None
) -> list:
    """
    Parse one invoice file or every invoice in a directory.

    Files that cannot be read are logged and skipped; documents with no
    product lines are returned with ``success=False``.

    Args:
        input_path: Path to input file or directory.
        catalog_path: Catalog snapshot JSON; None parses without one.
        output_dir: Directory for exports.
        excel: Whether to write an Excel workbook.
        diagnostics: Whether to write JSON diagnostics.
        evaluate: Whether to run evaluation.
        ground_truth_path: Ground truth file for evaluation.

    Returns:
        List of ParseResult objects.

    Example:
        >>> results = run_parsing("invoices/", "data/catalog.json")
        >>> for r in results:
        ...     print(r.invoice_number, r.item_count)
    """
    logger = get_logger(__name__)

    # Import pipeline components
    from src.input_handler import InputHandler
    from src.brand_resolution import BrandCatalog
    from src.pipeline import InvoiceParser
    from src.output_handler import OutputHandler

    input_handler = InputHandler()
    parser = InvoiceParser()
    catalog = BrandCatalog.from_json(catalog_path) if catalog_path else BrandCatalog()
    if not catalog_path:
        logger.warning("No catalog given: every item will be left unmatched")

    input_p = Path(input_path)
    files_to_process = input_handler.collect(input_p) if input_p.is_dir() else [input_p]
    logger.info(f"Processing {len(files_to_process)} files...")

    results = []
    for file_path in files_to_process:
        logger.info(f"Processing: {file_path.name}")
        try:
            document = input_handler.load(file_path)
        except InvoiceParsingError as e:
            logger.error(f"Skipping {file_path.name}: {e}")
            continue

        result = parser.parse_document(document, catalog, collect_trace=diagnostics)
        results.append(result)

        logger.info(
            f"  {result.invoice_number or 'N/A'}: {result.item_count} items, "
            f"{len(result.review_items)} for review, {len(result.warnings)} warnings"
        )

    if results and (excel or diagnostics):
        output_handler = OutputHandler(
            excel_enabled=excel,
            diagnostics_enabled=diagnostics,
            output_dir=output_dir
        )
        output_info = output_handler.save(results)
        if output_info.get('excel_path'):
            logger.info(f"Excel output: {output_info['excel_path']}")
        for path in output_info.get('diagnostics_paths', []):
            logger.info(f"Diagnostics: {path}")

    if evaluate:
        from src.evaluation import Evaluator

        ground_truth_path = ground_truth_path or get_config("evaluation.ground_truth_path")
        evaluator = Evaluator(ground_truth_path)
        evaluation = evaluator.evaluate(results)
        print(evaluation.print_report())

    return results


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function - entry point for command-line execution.

    Returns:
        Exit code (0 if every invoice parsed, 1 otherwise).
    """
    args = parse_arguments(argv)

    try:
        initialize_system(args)
        logger = get_logger(__name__)

        input_path = Path(args.input)
        if not input_path.exists():
            print(f"Error: Input path not found: {input_path}", file=sys.stderr)
            return 1

        results = run_parsing(
            input_path=args.input,
            catalog_path=args.catalog,
            output_dir=args.output,
            excel=args.excel,
            diagnostics=args.json,
            evaluate=args.evaluate,
            ground_truth_path=args.ground_truth
        )

        if not args.json and not args.excel:
            for result in results:
                print(result.to_json())

        failed = [r for r in results if not r.success]
        logger.info("=" * 60)
        logger.info(f"Parsing complete. {len(results) - len(failed)}/{len(results)} invoices accepted.")
        logger.info("=" * 60)

        return 1 if failed or not results else 0

    except InvoiceParsingError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
