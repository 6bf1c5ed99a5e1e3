"""macOS workstation bootstrap (declarative, rerun-safe).

Core design goals:
- Declarative desired state (one YAML document)
- Idempotent by rerun
- No elevated privileges (Homebrew lives in $HOME)
- Per-item failures never abort a batch
- Centralized logging
"""

__version__ = "1.1.0"

__all__ = ["__version__"]
