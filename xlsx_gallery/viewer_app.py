"""
Streamlit card gallery for extracted workbook records.

Run with:
  streamlit run xlsx_gallery/viewer_app.py

The data source is read from st.secrets / the environment
(XLSX_GALLERY_DATA, default data.json) and may be a path or an http(s) URL.
"""

import os
import re
from typing import Optional

import streamlit as st

from xlsx_gallery.gallery import DATA_SETTING, DEFAULT_DATA, GalleryState, load_gallery

STATE_KEY = "gallery_state"
GRID_COLUMNS = 4
NO_IMAGE = "No image"

_MARKDOWN_SPECIALS = re.compile(r"([\\`*_{}\[\]()#+\-.!$|<>~])")


def plain(text: str) -> str:
	"""Backslash-escape markdown and math markers so headings show ``text`` as written."""
	return _MARKDOWN_SPECIALS.sub(r"\\\1", text)


def _settings_value(key: str, default: Optional[str] = None) -> Optional[str]:
	try:
		secrets_obj = getattr(st, "secrets", None)
		if secrets_obj and key in secrets_obj:
			return secrets_obj[key]
	except Exception:
		# no secrets.toml anywhere
		pass
	return os.environ.get(key, default)


def _state() -> GalleryState:
	if STATE_KEY not in st.session_state:
		source = _settings_value(DATA_SETTING, DEFAULT_DATA)
		with st.spinner(f"Loading {source}..."):
			st.session_state[STATE_KEY] = load_gallery(source)
	return st.session_state[STATE_KEY]


def render_controls(state: GalleryState) -> None:
	if not state.records:
		st.info("No data loaded. Check your XLSX file.")
		return
	controls = state.controls()
	cols = st.columns(len(controls))
	for i, (col, control) in enumerate(zip(cols, controls)):
		col.button(
			control.label,
			key=f"filter-{i}",
			type="primary" if control.active else "secondary",
			on_click=state.apply_filter,
			args=(control.value,),
		)


def render_grid(state: GalleryState) -> None:
	cards = state.cards()
	for start in range(0, len(cards), GRID_COLUMNS):
		cols = st.columns(GRID_COLUMNS)
		for col, card in zip(cols, cards[start:start + GRID_COLUMNS]):
			with col.container(border=True):
				if card.has_image:
					st.image(card.image)
				else:
					st.caption(NO_IMAGE)
				st.subheader(plain(card.title))
				st.text(card.subtitle)
				st.button("Details", key=f"card-{card.index}", on_click=state.open_detail, args=(card.index,))


def render_detail(state: GalleryState) -> None:
	detail = state.detail()
	if detail is None:
		return
	with st.container(border=True):
		st.header(plain(detail.title))
		st.caption(f"{detail.index + 1} / {detail.total}")
		st.text(detail.type_line)
		if detail.image:
			st.image(detail.image)
		st.text(detail.description)
		prev_col, next_col, visit_col, close_col = st.columns(4)
		prev_col.button("Previous", key="detail-prev", on_click=state.navigate, args=(-1,), disabled=not detail.has_previous)
		next_col.button("Next", key="detail-next", on_click=state.navigate, args=(1,), disabled=not detail.has_next)
		if detail.website:
			visit_col.link_button("Visit website", detail.website)
		close_col.button("Close", key="detail-close", on_click=state.close_detail)


def main() -> None:
	st.set_page_config(page_title="Workbook Gallery", layout="wide")
	st.title("Workbook Gallery")
	state = _state()
	if state.error:
		st.error(state.error)
		return
	render_controls(state)
	render_detail(state)
	render_grid(state)


main()
