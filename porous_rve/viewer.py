"""Optional post-processing: open a result file in ParaView."""

import logging
import os
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

# Checked on Windows when 'paraview' is not on PATH
WINDOWS_PARAVIEW_PATHS = (
    r"C:\Program Files\ParaView 6.0.1\bin\paraview.exe",
    r"C:\Program Files\ParaView\bin\paraview.exe",
    r"C:\Program Files (x86)\ParaView 6.0.1\bin\paraview.exe",
    r"C:\Program Files (x86)\ParaView\bin\paraview.exe",
)


def find_paraview() -> Optional[str]:
    paraview_path = shutil.which("paraview")
    if paraview_path is not None:
        return paraview_path

    if sys.platform.startswith("win"):
        for candidate in WINDOWS_PARAVIEW_PATHS:
            if os.path.isfile(candidate):
                return candidate
    return None


def open_in_paraview(filename: Union[str, Path]) -> bool:
    """
    Try to open the given file with ParaView (non-blocking).

    Returns:
        True if ParaView was launched, False otherwise. Never raises.
    """
    full_path = os.path.abspath(filename)
    paraview_path = find_paraview()
    if paraview_path is None:
        logger.warning("Could not find 'paraview' in PATH. "
                       f"Please open the file manually: {full_path}")
        return False

    logger.info(f"Opening {filename} in ParaView using: {paraview_path}")
    try:
        subprocess.Popen([paraview_path, full_path])
    except OSError as e:
        logger.warning(f"Failed to open ParaView automatically: {e}. "
                       f"Please open {full_path} manually.")
        return False
    return True
