from __future__ import annotations

import logging
import os

from ..errors import ShellNotFound
from ..lib.assets import copy_file, ensure_dir
from ..lib.brew import shellenv_line
from ..lib.command import which
from ..lib.shellrc import ensure_line_present, source_files
from ..pipeline import RunContext, StepReport

logger = logging.getLogger(__name__)

SHELL = "zsh"


class ConfigureShellStep:
    step_id = "50_configure_shell"

    def run(self, ctx: RunContext) -> StepReport:
        s = ctx.settings
        report = StepReport(step_id=self.step_id)

        shell = which(SHELL)
        if not shell:
            logger.error("%s is not installed. Please install %s and try again.", SHELL, SHELL, extra={"status": 1})
            raise ShellNotFound(SHELL)

        for d in (s.xdg_config_home, s.zdotdir, s.git_dir):
            ensure_dir(d, dry_run=ctx.dry_run)

        template, zshenv = s.zshenv_template, s.zshenv_file
        logger.info("Copying %s to %s ...", template, zshenv)
        try:
            copy_file(template, zshenv, dry_run=ctx.dry_run)
        except OSError as e:
            logger.error("Failed to copy %s to %s: %s", template, zshenv, e, extra={"status": 1})
            report.failed.append(os.path.basename(template))
        else:
            logger.info("Copied %s to %s successfully.", template, zshenv)
            report.ok.append(os.path.basename(template))

        ensure_line_present(zshenv, shellenv_line(s.brew_cmd), dry_run=ctx.dry_run)

        if ctx.dry_run:
            return report

        env = source_files(shell, [zshenv, os.path.join(s.zdotdir, ".zshrc")])
        if env:
            os.environ.update(env)
            report.ok.append("environment")
        else:
            logger.warning("Shell environment was not refreshed")
            report.skipped.append("environment")
        return report
