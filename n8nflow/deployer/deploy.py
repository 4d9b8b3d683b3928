# n8nflow/deployer/deploy.py
"""
Compile a workflow and import it into n8n through the public REST API.

Connection settings come from arguments, else N8N_API_URL / N8N_API_KEY.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from n8nflow.compiler.compiler import compile_workflow
from n8nflow.compiler.schema_registry import SchemaRegistry
from n8nflow.utils.logger import get_logger

logger = get_logger("deployer")

DEFAULT_API_URL = "http://localhost:5678"
DEFAULT_TIMEOUT_SEC = 30.0


class DeployConfigError(RuntimeError):
    pass


class DeployError(RuntimeError):
    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


@dataclass
class DeployResult:
    id: str
    name: str
    url: str
    status: int


def _api_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.text


async def deploy_workflow(
    graph,
    api_url: Optional[str] = None,
    api_key: Optional[str] = None,
    activate: bool = False,
    registry: Optional[SchemaRegistry] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> DeployResult:
    """
    Compile `graph` and create it in n8n; optionally activate it afterwards.

    Raises:
        DeployConfigError: no API key configured
        WorkflowValidationError: the graph does not compile
        DeployError: n8n unreachable, or the workflow was rejected
    """
    api_url = (api_url or os.getenv("N8N_API_URL") or DEFAULT_API_URL).rstrip("/")
    api_key = api_key or os.getenv("N8N_API_KEY") or ""
    if not api_key:
        raise DeployConfigError("N8N_API_KEY not configured. Set it in the environment or pass api_key")

    compiled = await compile_workflow(graph, registry=registry)
    # the public API treats `active` as read-only on create
    payload: Dict[str, Any] = {k: v for k, v in compiled.items() if k != "active"}

    headers = {"Content-Type": "application/json", "X-N8N-API-KEY": api_key}
    owns_client = client is None
    client = client or httpx.AsyncClient(timeout=DEFAULT_TIMEOUT_SEC)
    try:
        logger.info("creating workflow %r at %s", compiled["name"], api_url)
        try:
            response = await client.post(f"{api_url}/api/v1/workflows", json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise DeployError(f"n8n not reachable at {api_url}: {e}") from e

        if response.is_error:
            raise DeployError(
                f"n8n rejected workflow: {_api_message(response)} (status {response.status_code})",
                status=response.status_code,
            )
        try:
            workflow_id = str(response.json()["id"])
        except (ValueError, KeyError, TypeError) as e:
            raise DeployError(
                f"n8n returned no workflow id (status {response.status_code})", status=response.status_code
            ) from e

        if activate:
            try:
                act = await client.patch(
                    f"{api_url}/api/v1/workflows/{workflow_id}", json={"active": True}, headers=headers
                )
            except httpx.HTTPError as e:
                raise DeployError(f"n8n not reachable at {api_url} during activation: {e}") from e
            if act.is_error:
                raise DeployError(
                    f"Failed to activate workflow: {_api_message(act)}", status=act.status_code
                )
            logger.info("activated workflow %s", workflow_id)
    finally:
        if owns_client:
            await client.aclose()

    return DeployResult(
        id=workflow_id,
        name=compiled["name"],
        url=f"{api_url}/workflow/{workflow_id}",
        status=response.status_code,
    )
