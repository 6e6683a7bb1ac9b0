"""Register a trusted office network from the command line.

Usage: python scripts/register_office.py "Head office" 203.0.113.10 [latitude longitude]
"""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
for _path in (REPO_ROOT, REPO_ROOT / "src" / "punchclock"):
    if str(_path) not in sys.path:
        sys.path.insert(0, str(_path))

from config import get_settings_module

from punchclock.container import build_container
from punchclock.core.enums import Role
from punchclock.core.exceptions import ValidationError


def main(argv: list[str]) -> None:
    if len(argv) not in (2, 4):
        raise SystemExit(__doc__)

    settings = importlib.import_module(get_settings_module())
    container = build_container(settings=settings)

    name, ip = argv[0], argv[1]
    latitude, longitude = (argv[2], argv[3]) if len(argv) == 4 else (None, None)
    try:
        office_id = container.office_service.register(
            current_role=Role.ADMIN,
            office_name=name,
            ip_address=ip,
            latitude=latitude,
            longitude=longitude,
        )
    except ValidationError as e:
        raise SystemExit(f"ERROR: {e}")
    print(f"OK: office {office_id} registered ({name} -> {ip})")


if __name__ == "__main__":
    main(sys.argv[1:])
