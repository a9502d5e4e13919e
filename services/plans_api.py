"""
Plans API - read-only plan catalogue
"""

import logging
from typing import List

from pydantic import ValidationError as SchemaError

from errors import ClientError
from models.plan import Plan
from models.responses import PlanResponse, PlansResponse
from services.api_client import ApiClient

logger = logging.getLogger(__name__)

PLANS_UNAVAILABLE = "Unable to load plans"


class PlansAPI:
    def __init__(self, client: ApiClient):
        self.client = client

    async def get_all(self) -> List[Plan]:
        """GET /plans - plans in catalogue order"""
        body = await self.client.request("GET", "/plans")
        return _parse(PlansResponse, body, "/plans").plans

    async def get_by_slug(self, slug: str) -> Plan:
        """GET /plans/{slug}"""
        path = f"/plans/{slug}"
        body = await self.client.request("GET", path)
        return _parse(PlanResponse, body, path).plan


def _parse(model, body: dict, path: str):
    try:
        return model.model_validate(body)
    except SchemaError as e:
        logger.error(f"Unexpected response shape from {path}: {e}")
        raise ClientError(PLANS_UNAVAILABLE) from e
