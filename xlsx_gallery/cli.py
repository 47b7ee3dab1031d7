#!/usr/bin/env python3
"""
Command-line interface for the xlsx_gallery extractor.
Usage:
  python -m xlsx_gallery.cli [excel_file] [options]

With no arguments reads realdata.xlsx and writes data.json in the working
directory.
"""

import argparse
import logging
import sys

from .extractor import XlsxGalleryExtractor

DEFAULT_INPUT = "realdata.xlsx"
DEFAULT_OUTPUT = "data.json"


def main(argv=None) -> None:
	parser = argparse.ArgumentParser(description='Convert a workbook into gallery JSON records with row images')
	parser.add_argument('excel_file', nargs='?', default=DEFAULT_INPUT,
				   help=f'Path to Excel file (default: {DEFAULT_INPUT})')
	parser.add_argument('--output', '-o', default=DEFAULT_OUTPUT,
				   help=f'Output JSON file (default: {DEFAULT_OUTPUT})')
	parser.add_argument('--indent', type=int, default=2, help='JSON indentation (default: 2)')
	parser.add_argument('--report', help='Also write extraction diagnostics to this JSON file')
	parser.add_argument('--verbose', '-v', action='store_true', help='Log every extraction step')
	args = parser.parse_args(argv)

	logging.basicConfig(
		level=logging.INFO if args.verbose else logging.WARNING,
		format="%(levelname)s %(name)s: %(message)s",
	)

	try:
		with XlsxGalleryExtractor(args.excel_file) as extractor:
			records = extractor.extract_records()
			count = extractor.export_to_json(records, args.output, indent=args.indent)
			report_file = extractor.export_report(args.report) if args.report else None
	except Exception as e:
		print(f"ERROR: {e}", file=sys.stderr)
		sys.exit(1)

	report = extractor.report
	print("\nExtraction completed successfully!")
	print(f"Rows: {count} ({report.records_with_image} with image)")
	print(f"Output file: {args.output}")
	if report_file:
		print(f"Report: {report_file}")


if __name__ == "__main__":
	main()
