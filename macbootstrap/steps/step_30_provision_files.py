from __future__ import annotations

import logging
import os

from ..config import FileCopySpec, has_placeholder
from ..lib.assets import chmod, copy_file, copy_tree, ensure_dir
from ..pipeline import RunContext, StepReport

logger = logging.getLogger(__name__)


def provision_file(spec: FileCopySpec, *, dry_run: bool = False) -> str:
    """Copy one file or tree to its destination and apply its mode.

    Returns "ok", "failed" (also for unresolved placeholders) or "skipped"
    (source missing).
    """

    source, destination, mode = spec.source, spec.destination, spec.permissions

    if any(has_placeholder(v) for v in (source, destination, mode)):
        logger.error("Unresolved placeholder in %s -> %s. Skipping.", source, destination, extra={"status": 1})
        return "failed"

    ensure_dir(os.path.dirname(destination) or ".", dry_run=dry_run)

    if os.path.isdir(source):
        logger.info("Copying directory %s to %s and setting permissions to %s...", source, destination, mode)
        copy_tree(source, destination, dry_run=dry_run)
        r = chmod(destination, mode, recursive=True, dry_run=dry_run)
    elif os.path.isfile(source):
        logger.info("Copying file %s to %s and setting permissions to %s...", source, destination, mode)
        copy_file(source, destination, dry_run=dry_run)
        r = chmod(destination, mode, dry_run=dry_run)
    else:
        logger.error("Source %s is neither a file nor a directory. Skipping.", source)
        return "skipped"

    if not r.ok:
        logger.error("chmod %s %s failed", mode, destination, extra={"status": r.returncode})
        return "failed"
    return "ok"


class ProvisionFilesStep:
    step_id = "30_provision_files"

    def run(self, ctx: RunContext) -> StepReport:
        report = StepReport(step_id=self.step_id)
        logger.info("Initializing files specified in %s...", ctx.config_path or "config")

        for spec in ctx.desired.file_copies:
            logger.info("Name: %s (%s -> %s, mode %s)", spec.label, spec.source, spec.destination, spec.permissions)
            try:
                outcome = provision_file(spec, dry_run=ctx.dry_run)
            except OSError as e:
                logger.error("Failed to copy %s to %s: %s", spec.source, spec.destination, e)
                outcome = "failed"

            if outcome == "skipped":
                report.skipped.append(spec.label)
            elif outcome == "ok":
                logger.info("Copied %s to %s successfully.", spec.source, spec.destination)
                report.ok.append(spec.label)
            else:
                logger.error("Failed to copy %s to %s.", spec.source, spec.destination, extra={"status": 1})
                report.failed.append(spec.label)

        return report
