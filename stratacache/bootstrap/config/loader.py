import os
from functools import lru_cache
from pathlib import Path


CONFIG_ENV = "STRATACONFIG"
DEFAULT_CONFIG = "strata.yaml"


@lru_cache
def get_configfile() -> Path | None:
    # Priority: ENV > default file in current working directory > no file
    raw = os.getenv(CONFIG_ENV)

    if raw is None:
        file = Path.cwd() / DEFAULT_CONFIG
        return file if file.is_file() else None

    file = Path(raw)
    if not file.is_file():
        raise SystemExit(
            f"[config] Configuration file not found: '{file}'.\n"
            f"  - Fix the {CONFIG_ENV} environment variable\n"
            f"  - Or unset it and place a '{DEFAULT_CONFIG}' file in the current working directory."
        )

    return file
