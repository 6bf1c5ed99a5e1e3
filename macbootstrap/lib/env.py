from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Paths:
    """Home-relative defaults used when the config document is silent."""

    config_default: str = "~/config.yaml"
    log_default: str = "~/init.log"
    recording_log_default: str = "~/terminal_session.log"
    marker_default: str = "~/.init_template_marker_file_ran"
    homebrew_marker_default: str = "~/.install_homebrew_ran"
    homebrew_dir_default: str = "~/homebrew"
    homebrew_tarball_url: str = "https://github.com/Homebrew/brew/tarball/master"
    bootstrap_script_default: str = "~/bootstrap.sh"


PATHS = Paths()

# Environment variables a config placeholder may reference besides prior settings.
ENV_ALLOW_LIST = ("HOME", "USER", "LOGNAME", "SHELL", "TMPDIR")
