#!/usr/bin/env python3
# n8nflow/cli.py

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import typer

from n8nflow.builder.workflow import WorkflowBuilder
from n8nflow.compiler.compiler import WorkflowValidationError, check_document, compile_workflow
from n8nflow.compiler.schema_registry import SchemaRegistry
from n8nflow.compiler.validation import validate_workflow
from n8nflow.deployer.deploy import DeployConfigError, DeployError, deploy_workflow
from n8nflow.utils.io import load_any, write_json
from n8nflow.utils.logger import init_logger

app = typer.Typer(help="n8nflow CLI - compile workflow graphs into n8n workflow JSON")


def _load_graph(path: Path) -> WorkflowBuilder:
    try:
        return WorkflowBuilder.from_dict(load_any(path))
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--input") from e


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")):
    if verbose:
        init_logger(level=logging.DEBUG)


@app.command()
def build(
    input: Path = typer.Option(..., "--input", "-i", exists=True, readable=True, help="Workflow graph (.json/.yaml)"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write compiled JSON here (default: stdout)"),
    schemas: Optional[Path] = typer.Option(None, "--schemas", help="Node type schema directory (default: $N8N_SCHEMA_DIR or ./schemas)"),
):
    """
    Compile a workflow graph into n8n workflow JSON.
    """
    wf = _load_graph(input)
    try:
        doc = asyncio.run(compile_workflow(wf, registry=SchemaRegistry(schemas)))
    except WorkflowValidationError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)

    schema_issues = check_document(doc)
    for it in schema_issues:
        typer.echo(f"- {it}", err=True)

    if out is None:
        typer.echo(json.dumps(doc, ensure_ascii=False, indent=2))
    else:
        write_json(out, doc)
        typer.echo(f"[ok] wrote {out} ({len(doc['nodes'])} nodes)")
    if schema_issues:
        raise typer.Exit(code=1)


@app.command()
def validate(
    input: Path = typer.Option(..., "--input", "-i", exists=True, readable=True, help="Workflow graph (.json/.yaml)"),
):
    """
    Validate a workflow graph and list every error and warning.
    """
    wf = _load_graph(input)
    result = validate_workflow(wf.get_nodes(), wf.get_connections())

    if result.errors:
        typer.echo("Errors:")
        for it in result.errors:
            typer.echo(f"- {it}")
    if result.warnings:
        typer.echo("Warnings:")
        for it in result.warnings:
            typer.echo(f"- {it}")

    if not result.valid:
        raise typer.Exit(code=1)
    typer.echo(f"[ok] {wf.name}: valid")


@app.command()
def deploy(
    input: Path = typer.Option(..., "--input", "-i", exists=True, readable=True, help="Workflow graph (.json/.yaml)"),
    activate: bool = typer.Option(False, "--activate", help="Activate the workflow after import"),
    api_url: Optional[str] = typer.Option(None, "--api-url", help="n8n base URL (default: $N8N_API_URL)"),
    schemas: Optional[Path] = typer.Option(None, "--schemas", help="Node type schema directory"),
):
    """
    Compile a workflow graph and create it in n8n.
    """
    wf = _load_graph(input)
    try:
        res = asyncio.run(deploy_workflow(wf, api_url=api_url, activate=activate, registry=SchemaRegistry(schemas)))
    except (WorkflowValidationError, DeployConfigError, DeployError) as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)

    typer.echo(f"[ok] deployed {res.name} -> {res.url} (status {res.status})")


if __name__ == "__main__":
    app()
