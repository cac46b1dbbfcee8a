#!/usr/bin/env python3
"""
CLI tool for NS1 monitoring jobs
Applies declared monitoring jobs from YAML/JSON files and inspects them
"""

import asyncio
import json
import logging
import os

import click
import yaml
from tabulate import tabulate

from config import LoggingConfig, get_config
from models import DeclaredState
from ns1_client import NS1Client
from reconciler import MonitoringJobReconciler, ReconcileError
from translator import TranslationError
from validation import StateValidationError, parse_declared_state

logger = logging.getLogger(__name__)

CLI_ERRORS = (ReconcileError, StateValidationError, TranslationError, ValueError)


def _load_file(filename):
    """Read a YAML or JSON document"""
    with open(filename, "r") as f:
        if filename.endswith(".yaml") or filename.endswith(".yml"):
            return yaml.safe_load(f)
        return json.load(f)


def _tracked_id(state_file):
    """Job id recorded in the state file, or an empty string"""
    if not state_file or not os.path.exists(state_file):
        return ""
    tracked = _load_file(state_file) or {}
    return tracked.get("id", "")


def _load_declared(filename, state_file):
    """Parse a declaration, attaching the job id tracked in the state file"""
    declared = parse_declared_state(_load_file(filename))
    declared.id = _tracked_id(state_file)
    return declared


def _save_state(state_file, data):
    if not state_file:
        return
    with open(state_file, "w") as f:
        json.dump(data, f, indent=2, sort_keys=True)
    logger.debug(f"Wrote tracked state to {state_file}")


def _run(operation):
    """Run a coroutine function against a reconciler bound to a live client"""

    async def runner():
        async with NS1Client.from_config(get_config().ns1) as client:
            return await operation(MonitoringJobReconciler(client))

    try:
        return asyncio.run(runner())
    except CLI_ERRORS as e:
        raise click.ClickException(getattr(e, "message", str(e)))


def _echo_state(state, output):
    data = state.to_dict()
    if output == "yaml":
        click.echo(yaml.dump(data, default_flow_style=False))
    elif output == "json":
        click.echo(json.dumps(data, indent=2, sort_keys=True))
    else:
        rows = []
        for key, value in data.items():
            if isinstance(value, (dict, list)):
                value = json.dumps(value, sort_keys=True)
            rows.append([key, value])
        click.echo(tabulate(rows, headers=["Field", "Value"], tablefmt="simple"))


@click.group()
def cli():
    """NS1 monitoring job CLI - declarative management of monitoring jobs"""
    logging.basicConfig(
        level=LoggingConfig.from_env().log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@cli.command()
@click.argument("filename", type=click.Path(exists=True))
@click.option("--state", "state_file", type=click.Path(), help="Tracked state file")
def apply(filename, state_file):
    """Create or update a monitoring job from a YAML/JSON file"""
    try:
        declared = _load_declared(filename, state_file)
    except StateValidationError as e:
        raise click.ClickException(e.message)

    tracked_id = declared.id
    try:
        result = _run(lambda reconciler: reconciler.apply(declared))
    except click.ClickException:
        # A job may have been created or deleted before the failure
        if declared.id != tracked_id:
            _save_state(state_file, {"id": declared.id})
        raise
    _save_state(state_file, result.state.to_dict())

    click.echo(result.message)
    if result.changed_fields:
        click.echo(f"Changed: {', '.join(result.changed_fields)}")
    click.echo(f"ID: {result.state.id}")


@cli.command()
@click.argument("filename", type=click.Path(exists=True))
@click.option("--state", "state_file", type=click.Path(), help="Tracked state file")
def plan(filename, state_file):
    """Show what apply would change"""
    try:
        declared = _load_declared(filename, state_file)
    except StateValidationError as e:
        raise click.ClickException(e.message)

    async def operation(reconciler):
        observed = await reconciler.read(declared) if declared.id else None
        return reconciler.plan(declared, observed)

    drift = _run(operation)

    if not drift.has_drift:
        click.echo("No changes")
    elif not drift.changed_fields:
        click.echo("Monitoring job will be created")
    elif drift.requires_replacement:
        click.echo(f"Monitoring job will be replaced. {drift.drift_details}")
    else:
        click.echo(f"Monitoring job will be updated. {drift.drift_details}")


@cli.command()
@click.argument("job_id")
@click.option(
    "--output", "-o", type=click.Choice(["table", "json", "yaml"]), default="table"
)
def get(job_id, output):
    """Show a monitoring job as flat state"""
    # Only the id is needed to read; the rest is filled from the response
    tracked = DeclaredState(
        id=job_id, name="", job_type="", regions=[], frequency=0, config={}
    )
    state = _run(lambda reconciler: reconciler.read(tracked))

    if state is None:
        raise click.ClickException(f"Monitoring job {job_id} not found")
    _echo_state(state, output)


@cli.command()
@click.argument("job_id")
@click.option("--state", "state_file", type=click.Path(), help="Tracked state file")
@click.confirmation_option(prompt="Are you sure you want to delete this job?")
def delete(job_id, state_file):
    """Delete a monitoring job"""
    tracked = DeclaredState(
        id=job_id, name="", job_type="", regions=[], frequency=0, config={}
    )
    try:
        _run(lambda reconciler: reconciler.delete(tracked))
    finally:
        # The id is cleared even when the delete call fails, but only for
        # the job this file tracks
        if _tracked_id(state_file) == job_id:
            _save_state(state_file, {})

    click.echo(f"Monitoring job {job_id} deleted")


if __name__ == "__main__":
    cli()
