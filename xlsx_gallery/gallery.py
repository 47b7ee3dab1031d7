#!/usr/bin/env python3
"""
View state for the card gallery.

GalleryState owns everything the viewer renders: the loaded records, the
active type filter, the filtered list and the open detail position. Every
change goes through one of its transitions (apply_filter, open_detail,
navigate, close_detail) and the projections (controls, cards, detail) are
computed from the state alone, so the Streamlit layer only draws what they
return.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Sequence

import requests

from ._export_impl import load_records_json
from .records import GalleryRecord

logger = logging.getLogger(__name__)

DATA_SETTING = "XLSX_GALLERY_DATA"
DEFAULT_DATA = "data.json"
ALL_LABEL = "All"
UNTITLED = "Untitled"
UNKNOWN_TYPE = "Unknown"
NO_DESCRIPTION = "No description available."


class GalleryLoadError(Exception):
	"""The gallery JSON could not be fetched or is not a record array."""


@dataclass(frozen=True)
class FilterControl:
	label: str
	value: Optional[str]
	active: bool


@dataclass(frozen=True)
class CardView:
	index: int
	title: str
	subtitle: str
	image: Optional[str]

	@property
	def has_image(self) -> bool:
		return bool(self.image)


@dataclass(frozen=True)
class DetailView:
	index: int
	total: int
	title: str
	type_line: str
	description: str
	image: Optional[str]
	website: Optional[str]

	@property
	def has_previous(self) -> bool:
		return self.index > 0

	@property
	def has_next(self) -> bool:
		return self.index < self.total - 1


def distinct_types(records: Sequence[GalleryRecord]) -> List[str]:
	seen: List[str] = []
	for record in records:
		if record.type and record.type not in seen:
			seen.append(record.type)
	return seen


@dataclass
class GalleryState:
	records: List[GalleryRecord] = field(default_factory=list)
	types: List[str] = field(default_factory=list)
	current_type: Optional[str] = None
	current: List[GalleryRecord] = field(default_factory=list)
	detail_index: int = -1
	error: Optional[str] = None

	@classmethod
	def from_records(cls, records: Sequence[GalleryRecord]) -> "GalleryState":
		records = list(records)
		return cls(records=records, types=distinct_types(records), current=list(records))

	@classmethod
	def failed(cls, message: str) -> "GalleryState":
		return cls(error=message)

	def apply_filter(self, type_value: Optional[str]) -> None:
		"""Show only records of ``type_value`` (``None`` for all) and close the detail view."""
		self.current_type = type_value or None
		if self.current_type is None:
			self.current = list(self.records)
		else:
			self.current = [r for r in self.records if r.type == self.current_type]
		self.detail_index = -1

	def open_detail(self, index: int) -> None:
		"""Open the detail view at a position of the current list; out of range is ignored."""
		if 0 <= index < len(self.current):
			self.detail_index = index

	def navigate(self, step: int) -> None:
		"""Move the open detail view by ``step``, clamped to the current list."""
		if self.detail_index < 0:
			return
		self.open_detail(min(max(self.detail_index + step, 0), len(self.current) - 1))

	def close_detail(self) -> None:
		"""Close the detail view."""
		self.detail_index = -1

	def controls(self) -> List[FilterControl]:
		out = [FilterControl(ALL_LABEL, None, self.current_type is None)]
		for t in self.types:
			out.append(FilterControl(t, t, self.current_type == t))
		return out

	def cards(self) -> List[CardView]:
		return [
			CardView(
				index=i,
				title=r.name or UNTITLED,
				subtitle=r.type or UNKNOWN_TYPE,
				image=r.image or None,
			)
			for i, r in enumerate(self.current)
		]

	def detail(self) -> Optional[DetailView]:
		if not 0 <= self.detail_index < len(self.current):
			return None
		r = self.current[self.detail_index]
		return DetailView(
			index=self.detail_index,
			total=len(self.current),
			title=r.name or UNTITLED,
			type_line=f"Type: {r.type or UNKNOWN_TYPE}",
			description=r.description or NO_DESCRIPTION,
			image=r.image or None,
			website=r.website or None,
		)


def fetch_payload(source: str, timeout: Optional[float] = None) -> Any:
	if source.startswith(("http://", "https://")):
		response = requests.get(source, timeout=timeout)
		response.raise_for_status()
		return response.json()
	return load_records_json(Path(source))


def load_gallery(source: str, timeout: Optional[float] = None) -> GalleryState:
	"""
	Load the record array from a URL or a local path.

	Failure of any kind gives a failed state carrying the message; there is no
	partial gallery.
	"""
	try:
		payload = fetch_payload(source, timeout=timeout)
		if not isinstance(payload, list):
			raise GalleryLoadError(f"{source} does not contain a JSON array")
	except (requests.RequestException, ValueError, OSError, GalleryLoadError) as e:
		logger.error("Error loading %s: %s", source, e)
		return GalleryState.failed(f"Could not load {source}")
	records = [GalleryRecord.from_mapping(entry) for entry in payload]
	logger.info("Loaded %d records from %s", len(records), source)
	return GalleryState.from_records(records)
