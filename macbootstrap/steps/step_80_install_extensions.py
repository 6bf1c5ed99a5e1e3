from __future__ import annotations

import logging
import os
import time

from ..lib import vscode
from ..lib.shellrc import ensure_line_present
from ..pipeline import RunContext, StepReport

logger = logging.getLogger(__name__)

# Pause between installs so the marketplace does not throttle us.
EXTENSION_INSTALL_DELAY_S = 1.0

SYSTEM_APPLICATIONS_DIR = "/Applications"


class InstallExtensionsStep:
    step_id = "80_install_extensions"

    def run(self, ctx: RunContext) -> StepReport:
        s = ctx.settings
        report = StepReport(step_id=self.step_id)

        app = vscode.find_app([SYSTEM_APPLICATIONS_DIR, s.applications_dir])
        if app:
            logger.info("Visual Studio Code is installed. Adding 'code' to PATH...")
            ensure_line_present(os.path.join(s.zdotdir, ".zshrc"), vscode.path_line(app), dry_run=ctx.dry_run)

        if not ctx.desired.extensions:
            return report

        code = vscode.resolve_code_cmd(s.code_cmd, app)
        if not code:
            logger.error("The '%s' command was not found; skipping editor extensions", s.code_cmd, extra={"status": 1})
            report.failed.extend(e.identifier for e in ctx.desired.extensions)
            return report

        logger.info("Number of extensions declared: %d", len(ctx.desired.extensions))
        for ext in ctx.desired.extensions:
            if ext.identifier in vscode.list_extensions(code):
                logger.info("Extension %s is already installed.", ext.identifier)
                report.skipped.append(ext.identifier)
                continue

            logger.info("Installing Visual Studio Code extension: %s ...", ext.identifier)
            r = vscode.install_extension(code, ext.identifier, dry_run=ctx.dry_run)
            if r.ok:
                logger.info("Successfully installed %s.", ext.identifier)
                report.ok.append(ext.identifier)
                time.sleep(EXTENSION_INSTALL_DELAY_S)
            else:
                logger.error(
                    "Failed to install %s. Continuing with the next extension...",
                    ext.identifier,
                    extra={"status": r.returncode},
                )
                report.failed.append(ext.identifier)

        return report
