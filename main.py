#!/usr/bin/env python3
"""
Invoice Analysis Engine - Main Entry Point.

Command-line access to the analysis engine: acquire text from a scanned
document (or take it verbatim) and print the structured record as JSON.

Usage:
    Command Line:
        python main.py --input invoice.pdf
        python main.py --input receipt.jpg --output result.json --trace
        python main.py --text "$(cat ocr_output.txt)"

    Python:
        from main import run_analysis
        record = run_analysis(input_path="invoice.pdf")

Author: ML Engineering Team
Version: 1.0.0
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

# Import project modules
from config import ConfigurationManager
from invoice_analyzer import InvoiceAnalyzer
from invoice_analyzer.ocr_engine import OCREngine
from invoice_analyzer.utils.exceptions import (
    DocumentNotFoundError, InputError, UnsupportedFileTypeError
)
from invoice_analyzer.utils.helpers import (
    ensure_directory, get_file_extension, validate_file_exists
)
from invoice_analyzer.utils.logger import ROOT_LOGGER_NAME, get_logger, setup_logger_from_config


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        argv: Argument list; defaults to sys.argv[1:].

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="Invoice / Receipt Text Analysis Engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    Analyze a scanned invoice:
        python main.py --input invoice.pdf

    Analyze OCR text and keep the decision trace:
        python main.py --text "Tax Invoice ... Total to pay: 1,170.00" --trace

    Write the record to a file:
        python main.py --input receipt.jpg --output outputs/receipt.json
        """
    )

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--input", "-i",
        type=str,
        help="Document to analyze (image, PDF or .txt)"
    )
    source.add_argument(
        "--text", "-t",
        type=str,
        help="Raw document text to analyze"
    )

    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Write the JSON record to this file instead of stdout"
    )

    parser.add_argument(
        "--trace",
        action="store_true",
        help="Include the decision trace in the output"
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to custom configuration file"
    )

    # Logging options
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )
    verbosity.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only log warnings and errors"
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
    if args.config:
        ConfigurationManager.reset()
    config = ConfigurationManager(args.config)

    logger = setup_logger_from_config()
    if args.debug:
        logger.setLevel(logging.DEBUG)
        for handler in logger.handlers:
            handler.setLevel(logging.DEBUG)
    elif args.quiet:
        logger.setLevel(logging.WARNING)

    logger.debug(f"Version: {config.get('project.version', '1.0.0')}")
    return config


def read_document_text(input_path: str, engine: Optional[OCREngine] = None) -> str:
    """
    Acquire the text of a document file.

    Args:
        input_path: Path to an image, PDF or .txt file.
        engine: OCR engine to use; a default one is created if None.

    Returns:
        Document text; empty when nothing could be read.

    Raises:
        DocumentNotFoundError: If the file doesn't exist.
        UnsupportedFileTypeError: If the extension isn't supported.
    """
    if not validate_file_exists(input_path):
        raise DocumentNotFoundError(input_path)

    engine = engine or OCREngine()
    extension = get_file_extension(input_path)
    if extension not in engine.supported_extensions:
        raise UnsupportedFileTypeError(extension or input_path, engine.supported_extensions)

    data = Path(input_path).read_bytes()
    return engine.extract_text(data, Path(input_path).name)


def run_analysis(
    input_path: Optional[str] = None,
    text: Optional[str] = None,
    include_trace: bool = False,
    analyzer: Optional[InvoiceAnalyzer] = None,
    engine: Optional[OCREngine] = None
) -> Dict[str, Any]:
    """
    Run text acquisition (for files) and analysis.

    Args:
        input_path: Document to analyze.
        text: Raw text to analyze; used when input_path is None.
        include_trace: Add the decision trace under the "trace" key.
        analyzer: Analyzer to use; a default one is created if None.
        engine: OCR engine for input_path.

    Returns:
        JSON-ready dictionary of the analysis result.
    """
    logger = get_logger(__name__)

    if input_path is not None:
        logger.info(f"Input: {input_path}")
        text = read_document_text(input_path, engine)

    analyzer = analyzer or InvoiceAnalyzer()
    result, trace = analyzer.analyze_with_trace(text or "")

    record = result.to_dict()
    if include_trace:
        record['trace'] = trace.to_list()
    return record


def write_output(record: Dict[str, Any], output_path: Optional[str] = None) -> None:
    """Write the record as JSON to a file, or to stdout when no path is given."""
    payload = json.dumps(record, indent=2, ensure_ascii=False)
    if output_path is None:
        print(payload)
        return

    path = Path(output_path)
    ensure_directory(path.parent)
    path.write_text(payload + "\n", encoding="utf-8")
    get_logger(__name__).info(f"Output: {path}")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function - entry point for command-line execution.

    Returns:
        Exit code (0 for success, 1 for input errors, 130 on interrupt).
    """
    try:
        args = parse_arguments(argv)
        initialize_system(args)

        record = run_analysis(
            input_path=args.input,
            text=args.text,
            include_trace=args.trace
        )
        write_output(record, args.output)
        return 0

    except (InputError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return 130

    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        if logging.getLogger(ROOT_LOGGER_NAME).isEnabledFor(logging.DEBUG):
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
