#!/usr/bin/env python3
"""
Workbook to gallery-records extractor.
Reads the first worksheet of an .xlsx archive, maps columns A-D onto record
fields and attaches the picture anchored to each row as a base64 data URL.
"""

from __future__ import annotations

import base64
import logging
import posixpath
import zipfile
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from openpyxl.packaging.relationship import get_rels_path
from openpyxl.utils import column_index_from_string, get_column_letter

from . import _ooxml
from ._export_impl import write_records_json, write_report_json
from .records import COLUMN_FIELDS, GalleryRecord

logger = logging.getLogger(__name__)

SHARED_STRINGS_PART = "xl/sharedStrings.xml"
WORKBOOK_PART = "xl/workbook.xml"
WORKBOOK_RELS_PART = "xl/_rels/workbook.xml.rels"
DEFAULT_SHEET_PART = "xl/worksheets/sheet1.xml"
MEDIA_DIR = "xl/media/"
DRAWINGS_DIR = "xl/drawings/"
HEADER_ROW = 1


class WorkbookFormatError(Exception):
	"""The archive or its primary worksheet cannot be read."""


@dataclass
class DrawingAnchor:
	row: int
	rel_id: str


@dataclass
class DrawingPart:
	path: str
	relationships: Dict[str, str] = field(default_factory=dict)
	anchors: List[DrawingAnchor] = field(default_factory=list)


@dataclass
class ExtractionReport:
	file_path: str = ""
	worksheet: str = ""
	extraction_timestamp: str = ""
	shared_strings: int = 0
	media_files: int = 0
	drawings_parsed: int = 0
	drawings_failed: int = 0
	relationship_parts_failed: int = 0
	relationship_parts_missing: int = 0
	anchors_found: int = 0
	anchors_skipped: int = 0
	unresolved_relationships: int = 0
	missing_media: int = 0
	duplicate_row_images: int = 0
	rows_mapped: int = 0
	records_written: int = 0
	records_with_image: int = 0

	def to_dict(self) -> Dict[str, Any]:
		return asdict(self)


class XlsxGalleryExtractor:
	"""Turn a workbook into a list of GalleryRecord, one per data row."""

	def __init__(self, excel_file_path: str):
		self.excel_file_path = Path(excel_file_path)
		self.archive: Optional[zipfile.ZipFile] = None
		self.report = ExtractionReport(file_path=str(self.excel_file_path))
		if not self.excel_file_path.exists():
			raise FileNotFoundError(f"Excel file not found: {excel_file_path}")

	def __enter__(self):
		self.open_workbook()
		return self

	def __exit__(self, exc_type, exc_val, exc_tb):
		self.close_workbook()

	def open_workbook(self) -> None:
		try:
			self.archive = zipfile.ZipFile(self.excel_file_path)
		except zipfile.BadZipFile as e:
			raise WorkbookFormatError(f"Not a valid xlsx archive: {self.excel_file_path}") from e
		self._names = self.archive.namelist()
		self._name_set = set(self._names)
		logger.info("Reading XLSX: %s", self.excel_file_path)

	def close_workbook(self) -> None:
		if self.archive is not None:
			self.archive.close()
			self.archive = None

	def _read(self, name: str) -> bytes:
		return self.archive.read(name)

	def _has(self, name: str) -> bool:
		return name in self._name_set

	def load_shared_strings(self) -> List[str]:
		"""Shared-string table, or an empty list when the workbook has none."""
		if not self._has(SHARED_STRINGS_PART):
			logger.info("No shared string table in %s", self.excel_file_path.name)
			return []
		strings = _ooxml.read_shared_strings(_ooxml.parse_xml(self._read(SHARED_STRINGS_PART)))
		self.report.shared_strings = len(strings)
		return strings

	def load_media(self) -> Dict[str, str]:
		"""
		Load every embedded media file as a data URL keyed by archive path.

		The MIME subtype comes from the lowercased extension; file contents are
		not inspected.
		"""
		media: Dict[str, str] = {}
		for info in self.archive.infolist():
			if info.is_dir() or not info.filename.startswith(MEDIA_DIR):
				continue
			ext = info.filename.rsplit(".", 1)[-1].lower()
			payload = base64.b64encode(self.archive.read(info)).decode("ascii")
			media[info.filename] = f"data:image/{ext};base64,{payload}"
		self.report.media_files = len(media)
		logger.info("Found %d media files.", len(media))
		return media

	def _load_relationships(self, drawing_path: str) -> Dict[str, str]:
		rels_path = get_rels_path(drawing_path)
		if not self._has(rels_path):
			self.report.relationship_parts_missing += 1
			logger.warning("No relationships part for %s", drawing_path)
			return {}
		try:
			return _ooxml.read_relationships(_ooxml.parse_xml(self._read(rels_path)))
		except Exception as e:
			self.report.relationship_parts_failed += 1
			logger.warning("Could not parse rels for %s: %s", drawing_path, e)
			return {}

	def _load_anchors(self, drawing_path: str) -> List[DrawingAnchor]:
		root = _ooxml.parse_xml(self._read(drawing_path))
		anchors: List[DrawingAnchor] = []
		for element in _ooxml.iter_anchors(root):
			row = _ooxml.anchor_row(element)
			rel_id = _ooxml.anchor_embed(element)
			if row and rel_id:
				anchors.append(DrawingAnchor(row=row, rel_id=rel_id))
			else:
				self.report.anchors_skipped += 1
		return anchors

	def parse_drawings(self) -> List[DrawingPart]:
		"""
		Read every drawing part with its relationships, in archive order.

		A drawing whose body cannot be parsed is kept with no anchors; missing or
		broken relationship parts give an empty map. Both are counted in the report.
		"""
		drawings: List[DrawingPart] = []
		for name in self._names:
			if not (name.startswith(DRAWINGS_DIR) and name.endswith(".xml")):
				continue
			part = DrawingPart(path=name, relationships=self._load_relationships(name))
			try:
				part.anchors = self._load_anchors(name)
				self.report.drawings_parsed += 1
				self.report.anchors_found += len(part.anchors)
				logger.info("Parsed %d anchors from %s", len(part.anchors), name)
			except Exception as e:
				self.report.drawings_failed += 1
				logger.warning("Failed parsing drawing file %s: %s", name, e)
			drawings.append(part)
		return drawings

	def resolve_row_images(self, drawings: List[DrawingPart], media: Dict[str, str]) -> Dict[int, str]:
		"""
		Build the one-based row -> data URL table.

		Args:
			drawings: parsed drawing parts, in archive order
			media: archive path -> data URL

		Returns:
			Dict with at most one image per row; the first anchor for a row wins.
		"""
		row_images: Dict[int, str] = {}
		for drawing in drawings:
			for anchor in drawing.anchors:
				target = drawing.relationships.get(anchor.rel_id)
				if not target:
					self.report.unresolved_relationships += 1
					logger.debug("%s: no relationship %s", drawing.path, anchor.rel_id)
					continue
				data_url = media.get(_ooxml.media_key(target, self._name_set))
				if not data_url:
					self.report.missing_media += 1
					logger.debug("No media data for %s", target)
					continue
				if anchor.row in row_images:
					self.report.duplicate_row_images += 1
					logger.info("Multiple images for row %d; keeping first.", anchor.row)
					continue
				row_images[anchor.row] = data_url
		self.report.rows_mapped = len(row_images)
		logger.info("Mapped images to rows for %d rows.", len(row_images))
		return row_images

	def first_worksheet_path(self) -> str:
		"""Archive path of the workbook's first sheet, falling back to sheet1.xml."""
		if not (self._has(WORKBOOK_PART) and self._has(WORKBOOK_RELS_PART)):
			return DEFAULT_SHEET_PART
		try:
			workbook = _ooxml.parse_xml(self._read(WORKBOOK_PART))
			first = _ooxml.child(_ooxml.child(workbook, "sheets"), "sheet")
			rel_id = _ooxml.attribute(first, "id")
			targets = {
				_ooxml.attribute(rel, "Id"): _ooxml.attribute(rel, "Target")
				for rel in _ooxml.children(_ooxml.parse_xml(self._read(WORKBOOK_RELS_PART)), "Relationship")
			}
		except Exception as e:
			logger.warning("Could not resolve first worksheet from workbook part: %s", e)
			return DEFAULT_SHEET_PART
		target = targets.get(rel_id) if rel_id else None
		if not target:
			return DEFAULT_SHEET_PART
		if target.startswith("/"):
			path = target[1:]
		else:
			path = posixpath.normpath(posixpath.join("xl", target))
		return path if self._has(path) else DEFAULT_SHEET_PART

	def _cell_value(self, cell, shared_strings: List[str]) -> str:
		value = _ooxml.child(cell, "v")
		if value is not None:
			raw = _ooxml.text_of(value)
			if _ooxml.attribute(cell, "t") == "s":
				try:
					index = int(raw)
				except ValueError:
					return ""
				return shared_strings[index] if 0 <= index < len(shared_strings) else ""
			return raw
		inline = _ooxml.child(cell, "is")
		if inline is not None:
			return _ooxml.string_item_text(inline)
		return ""

	def compose_records(self, shared_strings: List[str], row_images: Dict[int, str]) -> List[GalleryRecord]:
		"""
		Build one record per worksheet row after the header.

		Args:
			shared_strings: resolved shared-string table
			row_images: one-based row -> data URL

		Returns:
			Records in document order; row numbers are the declared ones.

		Raises:
			WorkbookFormatError: the worksheet is missing, unparsable or has a bad row or cell reference
		"""
		sheet_path = self.first_worksheet_path()
		self.report.worksheet = sheet_path
		if not self._has(sheet_path):
			raise WorkbookFormatError(f"Worksheet part missing: {sheet_path}")
		try:
			sheet = _ooxml.parse_xml(self._read(sheet_path))
		except Exception as e:
			raise WorkbookFormatError(f"Could not parse worksheet {sheet_path}: {e}") from e

		records: List[GalleryRecord] = []
		row_num = 0
		for row in _ooxml.children(_ooxml.child(sheet, "sheetData"), "row"):
			declared = _ooxml.attribute(row, "r")
			try:
				row_num = int(declared) if declared else row_num + 1
			except ValueError as e:
				raise WorkbookFormatError(f"Bad row number {declared!r} in {sheet_path}") from e
			if row_num == HEADER_ROW:
				continue
			values = {}
			col_idx = 0
			for cell in _ooxml.children(row, "c"):
				ref = _ooxml.attribute(cell, "r")
				if ref:
					col = _ooxml.column_of(ref)
					try:
						col_idx = column_index_from_string(col) if col.isalpha() else col_idx + 1
					except ValueError as e:
						raise WorkbookFormatError(f"Bad cell reference {ref!r} in {sheet_path}") from e
				else:
					col_idx += 1
					col = get_column_letter(col_idx)
				key = COLUMN_FIELDS.get(col)
				if key:
					values[key] = _ooxml.clean_value(self._cell_value(cell, shared_strings))
			records.append(GalleryRecord(image=row_images.get(row_num, ""), **values))
		return records

	def extract_records(self) -> List[GalleryRecord]:
		"""Run the whole pass: strings, media, drawings, row images, rows."""
		self.report.extraction_timestamp = datetime.now().isoformat()
		shared_strings = self.load_shared_strings()
		media = self.load_media()
		drawings = self.parse_drawings()
		row_images = self.resolve_row_images(drawings, media)
		records = self.compose_records(shared_strings, row_images)
		self.report.records_written = len(records)
		self.report.records_with_image = sum(1 for r in records if r.image)
		return records

	def export_to_json(self, records: List[GalleryRecord], output_file: str, indent: int = 2) -> int:
		"""
		Write records as a pretty-printed JSON array.

		Returns:
			int: number of records written
		"""
		count = write_records_json(records, Path(output_file), indent=indent)
		logger.info("Wrote %d rows to %s", count, output_file)
		return count

	def export_report(self, output_file: str) -> str:
		return write_report_json(self.report.to_dict(), Path(output_file))
