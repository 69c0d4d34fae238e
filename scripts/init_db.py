from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.readyroom.readyroom.common.logging_utils import configure_logging
from src.readyroom.readyroom.database.bootstrap import apply_schema, list_tables

logger = logging.getLogger("init_db")


def main() -> int:
    parser = argparse.ArgumentParser(description="Create the ReadyRoom reporting tables.")
    parser.add_argument("--schema", type=Path, default=REPO_ROOT / "database" / "schema.sql")
    args = parser.parse_args()

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config, schema_path=args.schema)
    tables = list_tables(db_config)
    logger.info(
        "Schema ready on %s@%s:%s/%s: %s",
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
        ", ".join(tables),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
