#!/usr/bin/env python3
from pathlib import Path
from typing import Union

from .extractor import ExtractionReport, XlsxGalleryExtractor


def convert_workbook(excel_file: Union[str, Path], output_file: Union[str, Path], indent: int = 2) -> ExtractionReport:
	"""Extract ``excel_file`` and write the records to ``output_file``; returns the run's report."""
	with XlsxGalleryExtractor(str(excel_file)) as extractor:
		records = extractor.extract_records()
		extractor.export_to_json(records, str(output_file), indent=indent)
	return extractor.report
