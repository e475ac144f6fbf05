"""
CodeLogic - Category Table
===========================
Maps the caller-facing category codes (building-code acronyms) to the
file names of the source documents indexed under each code.

The table is *configuration*, not logic: ``load_category_map`` returns
the built-in table unless ``settings.CATEGORY_MAP_PATH`` points to a
JSON file of the same shape::

    {"IBC": ["International_Building_Code_2021.pdf"], ...}
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from pathlib import Path

CategoryMap = Mapping[str, Sequence[str]]

DEFAULT_CATEGORY_MAP: dict[str, tuple[str, ...]] = {
    "ADA": ("ADA_Standards_2010.pdf", "ADA_Standards_Guidance_2010.pdf"),
    "IBC": ("International_Building_Code_2021.pdf",),
    "IFC": ("International_Fire_Code_2021.pdf",),
    "IFGC": ("International_Fuel_Gas_Code_2021.pdf",),
    "IMC": ("International_Mechanical_Code_2021.pdf",),
    "IPC": ("International_Plumbing_Code_2021.pdf",),
    "ISPSC": ("International_Swimming_Pool_and_Spa_Code_2021.pdf",),
    "IECC": ("International_Energy_Conservation_Code_2021.pdf",),
    "IRC": ("International_Residential_Code_2018.pdf",),
}


def load_category_map(path: Path | None = None) -> dict[str, tuple[str, ...]]:
    """
    Load the category table from *path*, or return the built-in one.

    Raises
    ------
    ValueError
        If the file is not a JSON object of string → list-of-strings.
    """
    if path is None:
        return dict(DEFAULT_CATEGORY_MAP)

    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError(f"Category map {path} must be a JSON object, got {type(raw).__name__}.")

    table: dict[str, tuple[str, ...]] = {}
    for code, files in raw.items():
        if not isinstance(files, list) or not all(isinstance(f, str) for f in files):
            raise ValueError(f"Category '{code}' in {path} must map to a list of file names.")
        table[str(code)] = tuple(files)
    return table
