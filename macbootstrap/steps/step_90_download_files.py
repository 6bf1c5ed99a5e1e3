from __future__ import annotations

import logging
import os

from ..config import DownloadSpec, has_placeholder
from ..lib.assets import ensure_dir
from ..lib.net import download_file, is_valid_url
from ..pipeline import RunContext, StepReport

logger = logging.getLogger(__name__)


def fetch_download(spec: DownloadSpec, *, dry_run: bool = False) -> bool:
    if has_placeholder(spec.source) or has_placeholder(spec.destination):
        logger.error(
            "Failed to download: %s -> %s has an unresolved placeholder.",
            spec.source,
            spec.destination,
            extra={"status": 1},
        )
        return False

    parent = os.path.dirname(spec.destination) or "."
    ensure_dir(parent, dry_run=dry_run)

    writable = dry_run or (os.path.isdir(parent) and os.access(parent, os.W_OK))
    if not is_valid_url(spec.source) or not writable:
        logger.error(
            "Failed to download: %s . Invalid source or parent directory is not writable.",
            spec.source,
            extra={"status": 1},
        )
        return False

    logger.info("URL is valid...")
    if not download_file(spec.source, spec.destination, dry_run=dry_run):
        logger.error("Failed to download file...", extra={"status": 1})
        return False
    if not dry_run and not os.path.isfile(spec.destination):
        logger.error("Failed to download file...", extra={"status": 1})
        return False

    logger.info("File successfully downloaded to %s ...", spec.destination)
    return True


class DownloadFilesStep:
    step_id = "90_download_files"

    def run(self, ctx: RunContext) -> StepReport:
        report = StepReport(step_id=self.step_id)
        logger.info("Downloading additional files specified in %s...", ctx.config_path or "config")

        for spec in ctx.desired.downloads:
            try:
                ok = fetch_download(spec, dry_run=ctx.dry_run)
            except OSError as e:
                logger.error("Failed to download %s: %s", spec.source, e)
                ok = False
            (report.ok if ok else report.failed).append(spec.label)

        logger.info("All additional files downloaded...")
        return report
