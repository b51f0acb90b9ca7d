from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Paths:
    repo_root: Path
    data_dir: Path
    schema_dir: Path
    userdata_dir: Path


def get_paths() -> Paths:
    # src/pushbox/paths.py -> parents: [pushbox, src, repo_root]
    repo_root = Path(__file__).resolve().parents[2]
    data_dir = Path(__file__).resolve().parent / "data"
    schema_dir = data_dir / "schemas"
    userdata_dir = repo_root / "userdata"
    return Paths(
        repo_root=repo_root,
        data_dir=data_dir,
        schema_dir=schema_dir,
        userdata_dir=userdata_dir,
    )
