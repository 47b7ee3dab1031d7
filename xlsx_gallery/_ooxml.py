#!/usr/bin/env python3
"""
Namespace-tolerant helpers for the handful of SpreadsheetML / DrawingML parts
the gallery extractor reads.

Elements are matched on their local name so that ``xdr:row``, ``{ns}row`` and
a bare ``row`` are the same thing. Anything that may appear once or many times
is returned as a list.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Optional

from openpyxl.xml.functions import fromstring

ANCHOR_TAGS = ("oneCellAnchor", "twoCellAnchor")
MEDIA_ROOT = "xl/"

_NEWLINE_MARKERS = re.compile(r"&#10;|\\n|\r\n|\n")
_DIGITS = re.compile(r"[0-9]")


def parse_xml(data: bytes):
	return fromstring(data)


def local_name(tag: object) -> str:
	# lxml hands back comments and processing instructions with callable tags
	if not isinstance(tag, str):
		return ""
	if "}" in tag:
		tag = tag.rsplit("}", 1)[1]
	if ":" in tag:
		tag = tag.rsplit(":", 1)[1]
	return tag


def children(elem, *names: str) -> List:
	if elem is None:
		return []
	return [c for c in elem if local_name(c.tag) in names]


def child(elem, *names: str):
	found = children(elem, *names)
	return found[0] if found else None


def attribute(elem, name: str) -> Optional[str]:
	if elem is None:
		return None
	for key, value in elem.attrib.items():
		if local_name(key) == name:
			return value
	return None


def text_of(elem) -> str:
	if elem is None or elem.text is None:
		return ""
	return elem.text


def string_item_text(item) -> str:
	"""
	Plain text of a shared-string ``si`` (or inline ``is``) element.

	A direct ``t`` wins; otherwise the ``r/t`` run fragments are joined with no
	separator. Run formatting is dropped and a run without a direct ``t``
	contributes nothing.
	"""
	direct = child(item, "t")
	if direct is not None:
		return text_of(direct)
	runs = children(item, "r")
	return "".join(text_of(child(run, "t")) for run in runs)


def read_shared_strings(root) -> List[str]:
	return [string_item_text(si) for si in children(root, "si")]


def normalize_rel_target(target: str) -> str:
	# openpyxl writes package-absolute targets ("/xl/media/image1.png")
	if target.startswith("/"):
		target = target[1:]
	if target.startswith("../"):
		return target.replace("../", MEDIA_ROOT, 1)
	if not target.startswith(MEDIA_ROOT):
		return MEDIA_ROOT + target
	return target


def read_relationships(root) -> Dict[str, str]:
	rel_map: Dict[str, str] = {}
	for rel in children(root, "Relationship"):
		rel_id = attribute(rel, "Id")
		target = attribute(rel, "Target")
		if rel_id and target:
			rel_map[rel_id] = normalize_rel_target(target)
	return rel_map


def anchor_row(anchor) -> Optional[int]:
	"""One-based row of an anchor's starting cell, or None."""
	row = child(child(anchor, "from"), "row")
	if row is None:
		return None
	try:
		return int(text_of(row).strip()) + 1
	except ValueError:
		return None


def anchor_embed(anchor) -> Optional[str]:
	blip = child(child(child(anchor, "pic"), "blipFill"), "blip")
	return attribute(blip, "embed") or None


def iter_anchors(root) -> Iterable:
	"""Every oneCellAnchor, then every twoCellAnchor; document order within each kind."""
	anchors: List = []
	for tag in ANCHOR_TAGS:
		anchors.extend(children(root, tag))
	return anchors


def media_key(target: str, archive_names) -> str:
	key = target if target.startswith(MEDIA_ROOT) else MEDIA_ROOT + target
	if key not in archive_names:
		key = key.replace("xl/drawings/../", MEDIA_ROOT)
	return key


def column_of(reference: str) -> str:
	return _DIGITS.sub("", reference)


def clean_value(value: str) -> str:
	return _NEWLINE_MARKERS.sub(" ", value).strip()
