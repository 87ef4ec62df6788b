#!/usr/bin/env python3
"""
Filename utilities for generating output filenames.
"""

from typing import Optional
import os
import logging

logger = logging.getLogger(__name__)

DEFAULT_MAP_BASENAME = "STP route"
MAX_NUMBERED_VARIANTS = 206  # one per route mile


def _reserve(candidate: str) -> bool:
    """
    Create candidate exclusively; False if it already exists.

    Raises:
        ValueError: If the file cannot be created for any other reason
    """
    try:
        with open(candidate, "x"):
            pass
        return True
    except FileExistsError:
        return False
    except OSError as e:
        logger.error(f"Cannot create file {candidate}: {e}")
        raise ValueError(f"Cannot create file: {e}")


def generate_output_filename(input_filename: Optional[str] = None) -> str:
    """
    Generates an output HTML filename and reserves it by creating an empty file.

    "ride.gpx" becomes "ride map.html"; without an input file the map is
    named "STP route map.html". Taken names get " (1)", " (2)", ... suffixes.

    Args:
        input_filename: Path to the replayed GPX file, if any

    Returns:
        Output filename that has been created as an empty file

    Raises:
        RuntimeError: If every numbered variant is taken
        ValueError: If a file cannot be created
    """
    if input_filename:
        input_dir = os.path.dirname(input_filename)
        base_name = os.path.basename(input_filename)
        if base_name.lower().endswith(".gpx"):
            base_name = base_name[:-4]
    else:
        input_dir = ""
        base_name = DEFAULT_MAP_BASENAME

    base_output = os.path.join(input_dir, base_name + " map")

    if _reserve(base_output + ".html"):
        return base_output + ".html"

    for i in range(1, MAX_NUMBERED_VARIANTS + 1):
        candidate = f"{base_output} ({i}).html"
        if _reserve(candidate):
            return candidate

    logger.error(
        f"Could not find an available filename after {MAX_NUMBERED_VARIANTS} attempts. "
        f"Please clean up your output directory or specify --output explicitly."
    )
    raise RuntimeError(
        f"No available filename found after {MAX_NUMBERED_VARIANTS} attempts"
    )
