"""IO helpers: YAML loading, path resolution, and dir creation."""

from pathlib import Path
from typing import Any, Dict

import yaml

# path key (also its key under ``files``) -> (data subdir, default file name)
INPUT_FILES = {
    "cases_states": ("raw", "us-states.csv"),
    "cases_counties": ("raw", "us-counties.csv"),
    "testing_states": ("raw", "states-daily.json"),
    "pop_states": ("external", "fips-pop-sta.csv"),
    "pop_counties": ("external", "fips-pop-cty.csv"),
}


def load_yaml(path: str | Path) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def ensure_dir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)


def resolve_paths(cfg: Dict[str, Any]) -> Dict[str, Path]:
    """
    Input dataset files plus the two output dirs (created if missing).

    Keys: root, processed, tables, and one per entry of INPUT_FILES. File
    names can be overridden in the ``files`` section of the config; case and
    testing files live under ``data/raw``, population tables under
    ``data/external``.
    """
    root = Path(cfg.get("project_root", ".")).resolve()
    data_root = root / "data"

    paths: Dict[str, Path] = {
        "root": root,
        "processed": data_root / "processed",
        "tables": root / "artifacts" / "tables",
    }

    files = cfg.get("files", {})
    for key, (subdir, default) in INPUT_FILES.items():
        paths[key] = data_root / subdir / files.get(key, default)

    for k in ("processed", "tables"):
        ensure_dir(paths[k])

    return paths
