from __future__ import annotations

import argparse
import logging
import os
from typing import List, Optional

from . import __version__
from .config import DesiredState, has_placeholder, load_config
from .errors import ConfigError, ProvisionError
from .lib.env import PATHS
from .logging_utils import (
    DEFAULT_LOG_PATH,
    DEFAULT_RECORDING_LOG_PATH,
    configure_logging,
    reset_logs,
    shutdown_logging,
)
from .pipeline import PipelineResult, RunContext, run_pipeline
from .steps import (
    BootstrapHomebrewStep,
    CloneInitRepoStep,
    ConfigureDesktopStep,
    ConfigureShellStep,
    DownloadFilesStep,
    FinalizeStep,
    InstallExtensionsStep,
    InstallNextcloudStep,
    InstallPackagesStep,
    ProvisionFilesStep,
)

logger = logging.getLogger(__name__)


DEFAULT_CONFIG_PATH = os.path.expanduser(PATHS.config_default)


def build_steps():
    return [
        BootstrapHomebrewStep(),
        CloneInitRepoStep(),
        ProvisionFilesStep(),
        InstallPackagesStep(),
        ConfigureShellStep(),
        InstallNextcloudStep(),
        ConfigureDesktopStep(),
        InstallExtensionsStep(),
        DownloadFilesStep(),
        FinalizeStep(),
    ]


STEP_IDS = [s.step_id for s in build_steps()]


def _warn_unresolved(desired: DesiredState) -> None:
    for name, value in desired.settings.values.items():
        if has_placeholder(value):
            logger.warning("settings.%s has an unresolved placeholder: %s", name, value)
    for text in desired.unresolved:
        logger.warning("Unresolved placeholder left as-is: %s", text)


def run(
    *,
    config_path: str = DEFAULT_CONFIG_PATH,
    log_path: Optional[str] = None,
    transcript_path: Optional[str] = None,
    dry_run: bool = False,
    gui: bool = True,
    cleanup: bool = True,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    level: int = logging.INFO,
) -> PipelineResult:
    """Converge this account to the desired state described by ``config_path``.

    Raises ProvisionError on the first fatal step.
    """

    config_path = os.path.expanduser(config_path)

    # The config names the log files, so it is read before logging starts.
    desired: Optional[DesiredState] = None
    config_error: Optional[ConfigError] = None
    try:
        desired = load_config(config_path)
    except ConfigError as e:
        config_error = e

    settings = desired.settings if desired else None
    log_path = log_path or (settings.log_file if settings else DEFAULT_LOG_PATH)
    transcript_path = transcript_path or (settings.recording_log if settings else DEFAULT_RECORDING_LOG_PATH)

    removed: List[str] = [] if dry_run else reset_logs(log_path, transcript_path)
    configure_logging(log_path=log_path, transcript_path=transcript_path, level=level)
    for p in removed:
        logger.info("Previous log %s deleted", p)

    logger.info("Welcome to macbootstrap v%s", __version__)

    if config_error is not None or desired is None:
        logger.error("Cannot load %s: %s", config_path, config_error, extra={"status": 1})
        raise config_error or ConfigError(config_path)

    logger.info(
        "Loaded %s (packages=%d copies=%d downloads=%d extensions=%d)",
        config_path,
        len(desired.packages),
        len(desired.file_copies),
        len(desired.downloads),
        len(desired.extensions),
    )
    _warn_unresolved(desired)

    ctx = RunContext(desired=desired, dry_run=dry_run, gui=gui, cleanup=cleanup, config_path=config_path)

    try:
        result = run_pipeline(ctx=ctx, steps=build_steps(), start_at=start_at, stop_after=stop_after)
    except ProvisionError:
        logger.exception("Provisioning failed")
        raise

    failed = result.failed_items
    if failed:
        logger.warning("Finished with %d recoverable failure(s): %s", len(failed), ", ".join(failed))
    else:
        logger.info("Finished without failures")

    if cleanup and not dry_run and FinalizeStep.step_id in result.ran_steps:
        logger.info("Deleting %s and %s ...", log_path, transcript_path)
        shutdown_logging()
        reset_logs(log_path, transcript_path)

    return result


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(
        prog="macbootstrap",
        description="Bring a fresh macOS account to the state described by a YAML document.",
    )
    p.add_argument("-v", "--version", action="version", version=f"Version: {__version__}")
    p.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="Desired-state YAML document")
    p.add_argument("--log", default=None, help="Session log (default: settings.log_file)")
    p.add_argument("--transcript", default=None, help="Recording transcript (default: settings.recording_log)")
    p.add_argument("--dry-run", action="store_true", help="Log every action without performing it")
    p.add_argument("--no-gui", action="store_true", help="Skip wallpaper and Dock changes")
    p.add_argument("--no-cleanup", action="store_true", help="Keep checkout, config, markers and logs")
    p.add_argument("--start-at", default=None, choices=STEP_IDS, help="Start at step_id (e.g. 40_install_packages)")
    p.add_argument("--stop-after", default=None, choices=STEP_IDS, help="Stop after step_id")
    p.add_argument("--verbose", action="store_true", help="Show command output on the console")

    args = p.parse_args(argv)

    try:
        run(
            config_path=args.config,
            log_path=args.log,
            transcript_path=args.transcript,
            dry_run=bool(args.dry_run),
            gui=not args.no_gui,
            cleanup=not args.no_cleanup,
            start_at=args.start_at,
            stop_after=args.stop_after,
            level=logging.DEBUG if args.verbose else logging.INFO,
        )
    except ProvisionError:
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
