#!/usr/bin/env python3
import argparse
import os
import subprocess
import sys
from pathlib import Path
from typing import List, Optional

from .gallery import DATA_SETTING, DEFAULT_DATA

APP_PATH = Path(__file__).resolve().parent / "viewer_app.py"


def build_command(port: Optional[int] = None) -> List[str]:
	cmd = [sys.executable, "-m", "streamlit", "run", str(APP_PATH)]
	if port:
		cmd += ["--server.port", str(port)]
	return cmd


def main(argv=None) -> None:
	parser = argparse.ArgumentParser(description="Browse gallery JSON records as cards in a Streamlit app.")
	parser.add_argument("data", nargs="?", default=DEFAULT_DATA, help=f"JSON file path or URL (default: {DEFAULT_DATA})")
	parser.add_argument("--port", type=int, help="Port for the Streamlit server")
	args = parser.parse_args(argv)

	env = dict(os.environ)
	env[DATA_SETTING] = args.data
	sys.exit(subprocess.call(build_command(args.port), env=env))


if __name__ == "__main__":
	main()
