import pytest

from n8nflow.builder.workflow import NodeRef, WorkflowBuilder, WorkflowConnection, workflow


def test_fluent_construction():
    wf = workflow("Demo")
    hook = wf.trigger("Webhook", "n8n-nodes-base.webhook", {"httpMethod": "POST"})
    slack = wf.node("Send Slack", "n8n-nodes-base.slack", {"text": "Hello"})
    wf.connect(hook, slack)
    wf.connect_error(slack, hook)

    assert hook == NodeRef("Webhook")
    assert [n.name for n in wf.get_nodes()] == ["Webhook", "Send Slack"]
    conns = wf.get_connections()
    assert [(c.source, c.target, c.connection_type) for c in conns] == [
        ("Webhook", "Send Slack", "main"),
        ("Send Slack", "Webhook", "error"),
    ]


def test_duplicate_names_rejected():
    wf = workflow("Dup")
    wf.trigger("A", "n8n-nodes-base.manualTrigger")
    with pytest.raises(ValueError, match="duplicate"):
        wf.node("A", "n8n-nodes-base.set")


def test_connect_unknown_node_rejected():
    wf = workflow("Unknown")
    a = wf.trigger("A", "n8n-nodes-base.manualTrigger")
    with pytest.raises(ValueError, match='Unknown node: "B"'):
        wf.connect(a, NodeRef("B"))
    with pytest.raises(ValueError, match='Unknown node: "B"'):
        wf.connect_error(NodeRef("B"), a)


def test_negative_indices_rejected():
    wf = workflow("Neg")
    a = wf.trigger("A", "n8n-nodes-base.manualTrigger")
    b = wf.node("B", "n8n-nodes-base.set")
    with pytest.raises(ValueError):
        wf.connect(a, b, output_index=-1)


def test_accessors_return_copies():
    wf = workflow("Copies")
    a = wf.trigger("A", "n8n-nodes-base.manualTrigger", {"nested": {"k": 1}})
    b = wf.node("B", "n8n-nodes-base.set")
    wf.connect(a, b)

    nodes = wf.get_nodes()
    nodes[0].parameters["nested"]["k"] = 99
    nodes.append(nodes[0])
    wf.get_connections()[0].target = "Elsewhere"

    assert wf.get_nodes()[0].parameters == {"nested": {"k": 1}}
    assert len(wf.get_nodes()) == 2
    assert wf.get_connections()[0].target == "B"


def test_from_dict_round_trip():
    data = {
        "name": "Loaded",
        "nodes": [
            {"name": "T", "type": "n8n-nodes-base.manualTrigger"},
            {"name": "S", "type": "n8n-nodes-base.slack", "parameters": {"text": "hi"},
             "credentials": {"slackApi": {"id": "7", "name": "Slack"}}},
        ],
        "connections": [{"from": "T", "to": "S", "outputIndex": 0, "inputIndex": 0, "connectionType": "main"}],
    }
    wf = WorkflowBuilder.from_dict(data)
    assert wf.name == "Loaded"
    assert wf.get_nodes()[1].credentials == {"slackApi": {"id": "7", "name": "Slack"}}
    assert wf.to_dict()["connections"] == data["connections"]


def test_from_dict_keeps_dangling_connections_for_validator():
    wf = WorkflowBuilder.from_dict({
        "name": "Dangling",
        "nodes": [{"name": "T", "type": "n8n-nodes-base.manualTrigger"}],
        "connections": [{"from": "T", "to": "Ghost"}],
    })
    assert wf.get_connections()[0].target == "Ghost"


@pytest.mark.parametrize("bad", [
    {"nodes": []},
    {"name": "x", "nodes": [{"name": "A"}]},
    {"name": "x", "nodes": [], "connections": [{"from": "A", "to": "B", "outputIndex": -1}]},
    {"name": "x", "nodes": [], "connections": [{"from": "A", "to": "B", "connectionType": "ai"}]},
])
def test_from_dict_rejects_malformed_shape(bad):
    with pytest.raises(ValueError, match="Malformed workflow graph"):
        WorkflowBuilder.from_dict(bad)


def test_node_arguments_are_copied_on_add():
    params = {"options": {"headers": {"X-Test": "1"}}}
    creds = {"slackApi": {"id": "1", "name": "Slack"}}
    wf = workflow("Snapshot")
    wf.node("Send", "n8n-nodes-base.slack", params, creds)

    params["options"]["headers"]["X-Test"] = "changed"
    creds["slackApi"]["id"] = "2"

    node = wf.get_nodes()[0]
    assert node.parameters == {"options": {"headers": {"X-Test": "1"}}}
    assert node.credentials == {"slackApi": {"id": "1", "name": "Slack"}}


def test_unknown_connection_type_rejected():
    with pytest.raises(ValueError, match="Unknown connection type 'ai_tool'"):
        WorkflowConnection("A", "B", connection_type="ai_tool")
    assert WorkflowConnection("A", "B", connection_type="error").connection_type == "error"
