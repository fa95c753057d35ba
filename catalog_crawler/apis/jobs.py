from __future__ import annotations

import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

CSV_NAME = "produtos.csv"
IMAGE_DIR_NAME = "imagens"
ZIP_NAME = "output.zip"


@dataclass(frozen=True)
class JobPaths:
    """On-disk layout of one crawl job: <root>/produtos.csv, <root>/imagens/, <root>/output.zip."""
    job_id: str
    root: Path

    @property
    def csv_path(self) -> Path:
        return self.root / CSV_NAME

    @property
    def image_dir(self) -> Path:
        return self.root / IMAGE_DIR_NAME

    @property
    def zip_path(self) -> Path:
        return self.root / ZIP_NAME

    @classmethod
    def create(cls, base_dir: str | Path) -> "JobPaths":
        """Allocate a fresh job directory under ``base_dir``."""
        job_id = str(uuid.uuid4())
        return cls.at(Path(base_dir) / job_id, job_id=job_id)

    @classmethod
    def at(cls, root: str | Path, job_id: Optional[str] = None) -> "JobPaths":
        root = Path(root)
        job = cls(job_id=job_id or root.name, root=root)
        job.image_dir.mkdir(parents=True, exist_ok=True)
        return job


def resolve_download(base_dir: str | Path, job_id: str, file_name: str) -> Optional[Path]:
    """Path of a job artifact, or None if it is missing or would escape the job directory."""
    job_root = (Path(base_dir) / job_id).resolve()
    target = (job_root / file_name).resolve()
    if job_root.parent != Path(base_dir).resolve() or job_root not in target.parents:
        return None
    if not target.is_file():
        return None
    return target
