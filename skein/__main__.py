"""
Skein CLI Framework

Copyright (c) 2025 rtj.dev LLC.
Licensed under the MIT License. See LICENSE file for details.
"""

import asyncio
import sys
from pathlib import Path
from typing import Any

from skein.app import Skein
from skein.config import find_config
from skein.console import console


def bootstrap() -> Path | None:
    config_path = find_config()
    if config_path and str(config_path.parent) not in sys.path:
        sys.path.insert(0, str(config_path.parent))
    return config_path


def main() -> Any:
    config_path = bootstrap()
    if not config_path:
        console.print(
            "[skein.error]❌ No Skein config found.[/] "
            "Create skein.yaml, skein.toml or a [tool.skein] table in pyproject.toml."
        )
        sys.exit(1)
    app = Skein.from_config(config_path)
    return asyncio.run(app.run())


if __name__ == "__main__":
    main()
