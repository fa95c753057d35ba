from __future__ import annotations

import zipfile
from pathlib import Path


def build_archive(csv_path: str | Path, image_dir: str | Path, zip_path: str | Path) -> Path:
    """
    Bundle the catalog CSV and every downloaded image into one zip.
    Images land under ``<image_dir name>/`` inside the archive.
    """
    csv_path, image_dir, zip_path = Path(csv_path), Path(image_dir), Path(zip_path)
    zip_path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(zip_path, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=9) as zf:
        zf.write(csv_path, arcname=csv_path.name)
        if image_dir.is_dir():
            for image in sorted(p for p in image_dir.rglob("*") if p.is_file()):
                zf.write(image, arcname=f"{image_dir.name}/{image.relative_to(image_dir).as_posix()}")
    return zip_path
