import pytest

from n8nflow.builder.workflow import workflow
from n8nflow.compiler.schema_registry import SchemaRegistry

SCHEMAS = [
    {"name": "n8n-nodes-base.manualTrigger", "version": 1},
    {"name": "n8n-nodes-base.if", "version": [1, 2], "defaultVersion": 2},
    {"name": "n8n-nodes-base.set", "version": [1, 2, 3, 3.4]},
    {"name": "n8n-nodes-base.httpRequest", "version": [1, 2, 3, 4, 4.2], "defaultVersion": 4.2},
]


@pytest.fixture
def registry():
    return SchemaRegistry(loader=lambda: [dict(s) for s in SCHEMAS])


@pytest.fixture
def if_workflow():
    """Start -> Check (IF) -> SetTrue (output 0) / SetFalse (output 1)."""
    wf = workflow("IF Test")
    start = wf.trigger("Start", "n8n-nodes-base.manualTrigger")
    check = wf.node("Check", "n8n-nodes-base.if", {"conditions": {}})
    yes = wf.node("SetTrue", "n8n-nodes-base.set")
    no = wf.node("SetFalse", "n8n-nodes-base.set")
    wf.connect(start, check)
    wf.connect(check, yes, 0)
    wf.connect(check, no, 1)
    return wf
