from __future__ import annotations

import logging
import os

from ..lib.macos import dock_add, restart_dock, set_wallpaper
from ..pipeline import RunContext, StepReport

logger = logging.getLogger(__name__)


class ConfigureDesktopStep:
    """Wallpaper and Dock entries. GUI-only; disabled with --no-gui."""

    step_id = "70_configure_desktop"

    def run(self, ctx: RunContext) -> StepReport:
        s = ctx.settings
        report = StepReport(step_id=self.step_id)

        if not ctx.gui:
            logger.info("GUI configuration disabled; skipping wallpaper and Dock")
            report.skipped.append("desktop")
            return report

        if os.path.isfile(s.wallpaper):
            r = set_wallpaper(s.wallpaper, dry_run=ctx.dry_run)
            (report.ok if r.ok else report.failed).append("wallpaper")
        else:
            logger.info("No wallpaper at %s", s.wallpaper)
            report.skipped.append("wallpaper")

        dockutil = os.path.join(os.path.dirname(s.brew_cmd), "dockutil")
        for pkg in ctx.desired.packages:
            if not pkg.install_directory:
                continue
            r = dock_add(dockutil, pkg.install_directory, dry_run=ctx.dry_run)
            if r.ok:
                logger.info("(%s) %s has been added to the Dock.", pkg.name, pkg.install_directory)
                report.ok.append(pkg.name)
            else:
                logger.error("Could not add %s to the Dock", pkg.install_directory, extra={"status": r.returncode})
                report.failed.append(pkg.name)

        restart_dock(dry_run=ctx.dry_run)
        return report
