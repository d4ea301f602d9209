from __future__ import annotations

import argparse
import importlib

from dotenv import load_dotenv

from hr_dashboard.config import get_settings_module
from hr_dashboard.database.bootstrap import apply_schema, list_tables


def main() -> None:
    parser = argparse.ArgumentParser(description="Create the HR dashboard database and apply schema.sql")
    parser.add_argument("--schema", help="path to an alternative schema file")
    args = parser.parse_args()

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config, schema_path=args.schema)
    tables = list_tables(db_config)
    print(
        "OK: Applied schema.sql -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')} "
        f"(tables={len(tables)})"
    )


if __name__ == "__main__":
    main()
