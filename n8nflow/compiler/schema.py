# n8nflow/compiler/schema.py

# Serialized builder graph: flat node and connection lists.
GRAPH_INPUT_SCHEMA = {
    "type": "object",
    "required": ["name", "nodes"],
    "properties": {
        "name": {"type": "string"},
        "nodes": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name", "type"],
                "properties": {
                    "name": {"type": "string", "minLength": 1},
                    "type": {"type": "string", "minLength": 1},
                    # open-ended; node parameter shapes come from the n8n catalog
                    "parameters": {"type": "object"},
                    "credentials": {
                        "type": "object",
                        "additionalProperties": {
                            "type": "object",
                            "required": ["id", "name"],
                            "properties": {
                                "id": {"type": "string"},
                                "name": {"type": "string"},
                            },
                        },
                    },
                },
                "additionalProperties": True,
            },
        },
        "connections": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["from", "to"],
                "properties": {
                    "from": {"type": "string"},
                    "to": {"type": "string"},
                    "outputIndex": {"type": "integer", "minimum": 0},
                    "inputIndex": {"type": "integer", "minimum": 0},
                    "connectionType": {"enum": ["main", "error"]},
                },
                "additionalProperties": False,
            },
        },
    },
}


_HOP = {
    "type": "object",
    "required": ["node", "type", "index"],
    "properties": {
        "node": {"type": "string"},
        "type": {"enum": ["main", "error"]},
        "index": {"type": "integer", "minimum": 0},
    },
    "additionalProperties": False,
}

# One output port per inner array; empty arrays are legal gap fillers.
_PORTS = {
    "type": "array",
    "items": {"type": "array", "items": _HOP},
}

# Compiled document as imported by n8n.
WORKFLOW_DOCUMENT_SCHEMA = {
    "type": "object",
    "required": ["name", "nodes", "connections", "active", "settings"],
    "properties": {
        "name": {"type": "string"},
        "nodes": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["id", "name", "type", "typeVersion", "position", "parameters"],
                "properties": {
                    "id": {"type": "string", "minLength": 1},
                    "name": {"type": "string", "minLength": 1},
                    "type": {"type": "string", "minLength": 1},
                    "typeVersion": {"type": "number"},
                    # canvas position as [x, y]
                    "position": {
                        "type": "array",
                        "items": {"type": "number"},
                        "minItems": 2,
                        "maxItems": 2,
                    },
                    "parameters": {"type": "object"},
                    "credentials": {"type": "object"},
                },
                "additionalProperties": False,
            },
        },
        "connections": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "properties": {"main": _PORTS, "error": _PORTS},
                "additionalProperties": False,
            },
        },
        "active": {"const": False},
        "settings": {"type": "object"},
    },
    "additionalProperties": False,
}
