"""Platform directory paths for steadfast.

Log and configuration locations follow the platform conventions exposed by
``platformdirs``. Nothing is created on import; the logger creates the log
directory when file output is enabled.
"""

import os
from pathlib import Path

from platformdirs import user_config_dir, user_data_dir

APP_NAME = "steadfast"


class GlobalPath:
    """Global path management for steadfast directories."""

    @classmethod
    def data(cls) -> str:
        override = os.environ.get("STEADFAST_DATA_DIR")
        if override:
            return override
        return user_data_dir(APP_NAME)

    @classmethod
    def log(cls) -> str:
        """Log file directory."""
        return str(Path(cls.data()) / "log")

    @classmethod
    def config(cls) -> str:
        override = os.environ.get("STEADFAST_CONFIG_DIR")
        if override:
            return override
        return user_config_dir(APP_NAME)
