# config.py
import os
from typing import List

from dotenv import load_dotenv

load_dotenv()

SERVICE_NAME = "hotspot-advisor"
VERSION = os.getenv("SERVICE_VERSION", "0.1.0")

BUNDLED_RULE_FILE = os.path.join(
    os.path.dirname(os.path.abspath(__file__)), "hotspot_rules", "tidb_hotspot.json"
)

# Comma-separated; all files are compiled into the same rule set.
HOTSPOT_RULE_FILES_RAW = os.getenv("HOTSPOT_RULE_FILES", BUNDLED_RULE_FILE)
HOTSPOT_RULE_NAME = os.getenv("HOTSPOT_RULE_NAME", "TiDBHotspot")
HOTSPOT_RULE_VERSION = os.getenv("HOTSPOT_RULE_VERSION", "1.0.0")


def rule_files() -> List[str]:
    return [p.strip() for p in HOTSPOT_RULE_FILES_RAW.split(",") if p.strip()]
