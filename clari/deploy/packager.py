"""Artifact Packager: zip the function source into a deployable archive."""

from __future__ import annotations

import logging
import os
import zipfile
from pathlib import Path

from clari.deploy.errors import PackagingError
from clari.deploy.types import ArtifactBundle

logger = logging.getLogger("clari.deploy")


class ArtifactPackager:
    """Bundle a source directory into ``<build_dir>/<artifact_name>``."""

    def __init__(self, build_dir: Path | str, artifact_name: str = "lambda-deployment.zip") -> None:
        self._build_dir = Path(build_dir)
        self._artifact_name = artifact_name

    def package(self, source_dir: Path | str) -> ArtifactBundle:
        source = Path(source_dir)
        if not source.is_dir():
            raise PackagingError(f"Function source directory not found: {source}")

        try:
            self._build_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PackagingError(f"Could not prepare build directory: {exc}") from exc

        zip_path = self._build_dir / self._artifact_name
        staging_path = zip_path.with_name(f".{zip_path.name}.partial")

        try:
            file_count = self._write_archive(source, staging_path)
        except (OSError, ValueError, zipfile.LargeZipFile) as exc:
            staging_path.unlink(missing_ok=True)
            raise PackagingError(f"Failed to package function code: {exc}") from exc

        if not file_count:
            staging_path.unlink(missing_ok=True)
            raise PackagingError(f"Function source directory is empty: {source}")

        # The archive is only valid once closed; publish it atomically.
        try:
            os.replace(staging_path, zip_path)
            size_bytes = zip_path.stat().st_size
        except OSError as exc:
            staging_path.unlink(missing_ok=True)
            raise PackagingError(f"Could not publish function archive: {exc}") from exc

        logger.info("Lambda code packaged: %d bytes (%d files)", size_bytes, file_count)
        return ArtifactBundle(path=zip_path, size_bytes=size_bytes, file_count=file_count)

    @staticmethod
    def _write_archive(source: Path, target: Path) -> int:
        file_count = 0
        # Sources checked out with pre-1980 mtimes are clamped instead of rejected.
        with zipfile.ZipFile(
            target,
            "w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=9,
            strict_timestamps=False,
        ) as archive:
            for entry in sorted(source.iterdir()):
                if entry.is_file():
                    archive.write(entry, entry.name)
                    file_count += 1
                elif entry.is_dir():
                    for nested in sorted(entry.rglob("*")):
                        if nested.is_file() and "__pycache__" not in nested.parts:
                            archive.write(nested, nested.relative_to(source).as_posix())
                            file_count += 1
        return file_count


__all__ = ["ArtifactPackager"]
