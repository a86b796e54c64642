"""
Spreadsheet-linking collaborator.

The sync protocol with the spreadsheet provider is not implemented: the
shipped client only logs the request and returns empty results. The store
depends on the four fetch coroutines below, so a real client can be dropped
in without touching it.
"""

import logging
import re
from typing import Any

from persistence.errors import ValidationError

logger = logging.getLogger(__name__)

_SPREADSHEET_PATH = re.compile(r"/spreadsheets/d/([A-Za-z0-9_-]+)")


def extract_spreadsheet_id(url: str) -> str:
    """Pull the spreadsheet id out of a sharing URL.

    Accepts the usual ``.../spreadsheets/d/<id>/edit`` form and otherwise falls
    back to the second-to-last path segment.
    """
    url = (url or "").strip()
    match = _SPREADSHEET_PATH.search(url)
    if match:
        return match.group(1)
    parts = url.split("?")[0].split("/")
    if len(parts) >= 2 and parts[-2] and "." not in parts[-2] and not parts[-2].endswith(":"):
        return parts[-2]
    raise ValidationError(f"Could not find a spreadsheet id in '{url}'")


class SheetsClient:
    """Placeholder client returning no records."""

    async def fetch_employee_data(self, spreadsheet_id: str) -> list[dict[str, Any]]:
        logger.info("Fetching employee data for sheet %s", spreadsheet_id)
        return []

    async def fetch_goals(self, spreadsheet_id: str) -> dict[str, list[dict[str, Any]]]:
        logger.info("Fetching goals for sheet %s", spreadsheet_id)
        return {}

    async def fetch_competencies(self, spreadsheet_id: str) -> dict[str, list[dict[str, Any]]]:
        logger.info("Fetching competencies for sheet %s", spreadsheet_id)
        return {}

    async def fetch_feedbacks(self, spreadsheet_id: str) -> dict[str, list[dict[str, Any]]]:
        logger.info("Fetching feedbacks for sheet %s", spreadsheet_id)
        return {}
