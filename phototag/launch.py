# phototag/launch.py
"""
Open files and folders with the platform's default handler.
"""

import logging
import os
import subprocess
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


def _opener_command() -> str:
    if sys.platform == "darwin":
        return "open"
    return "xdg-open"


def open_path(path: Path | str) -> None:
    """
    Open a file or directory in the desktop's viewer / file browser.

    Raises:
        FileNotFoundError: If the path does not exist
        subprocess.CalledProcessError: If the opener command fails
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Path not found: {path}")

    logger.info(f"Opening {path}")
    if sys.platform == "win32":
        os.startfile(str(path))
        return
    subprocess.run([_opener_command(), str(path)], check=True, capture_output=True)
