"""
CLI interface for promostep.

Runs the helm-update-image promotion step outside a promotion engine:
the step config, the Freight and the warehouse manifests are read from
YAML (or JSON) files and the step result is printed as JSON.
"""

import json
from pathlib import Path
from typing import Any

import click
import yaml

from promostep import __version__


def _load_document(path: Path) -> Any:
    """Load a YAML or JSON document."""
    try:
        with open(path, "r") as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise click.BadParameter(f"{path} is not valid YAML/JSON: {e}")


@click.group()
@click.version_option(version=__version__, prog_name="promostep")
@click.pass_context
def main(ctx):
    """
    promostep - Freight-driven promotion steps.

    Update image references in Helm values files from verified Freight.
    """
    from promostep.config import ConfigError, load_config
    from promostep.utils import setup_logging

    ctx.ensure_object(dict)
    try:
        config = load_config()
    except FileNotFoundError:
        # commands work without a config, falling back to defaults
        setup_logging()
        return
    except ConfigError as e:
        # init --force is how a broken config gets replaced
        if ctx.invoked_subcommand != "init":
            raise click.ClickException(f"Invalid promostep config: {e}")
        setup_logging()
        return

    ctx.obj["config"] = config
    setup_logging(
        log_file=config.get_log_file_path(),
        log_level=config.log_level,
        log_format=config.log_format,
    )


@main.command("init")
@click.option("--force", is_flag=True, help="Overwrite existing configuration")
def init(force: bool):
    """Initialize promostep configuration."""
    from promostep.config import get_promostep_home

    home = get_promostep_home()
    if not home.exists():
        home.mkdir(parents=True)

    cfg_path = home / "config.yaml"
    if cfg_path.exists() and not force:
        click.echo(f"Config already exists at {cfg_path}. Use --force to overwrite.", err=True)
        raise SystemExit(1)

    default_cfg = {
        "project": "",
        "log_level": "INFO",
        "log_format": "pretty",
        "log_file": None,
        "env_file": str(home / ".env"),
    }
    cfg_path.write_text(yaml.safe_dump(default_cfg, sort_keys=False))

    env_path = home / ".env"
    if not env_path.exists():
        env_path.write_text("# PROMOSTEP_HOME=...\n")

    click.echo(f"Initialized promostep config at {cfg_path}")


@main.command("validate")
@click.argument("config_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def validate(config_file: Path):
    """
    Validate a helm-update-image step config.

    Prints every problem found; exits 1 if the config is invalid.
    """
    from promostep.validation import collect_problems

    problems = collect_problems(_load_document(config_file))
    if problems:
        click.echo(f"✗ {config_file} is invalid:", err=True)
        for problem in problems:
            click.echo(f"  - {problem}", err=True)
        raise SystemExit(1)
    click.echo(f"✓ {config_file} is valid")


@main.command("run")
@click.argument("config_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--work-dir", required=True,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Working directory holding the values file",
)
@click.option(
    "--freight", "freight_file", required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML file with {freight: {<kind>/<name>: ...}, requests: [...]}",
)
@click.option(
    "--warehouses", "warehouses_file", required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML file listing warehouse manifests",
)
@click.option("--project", default=None, help="Project warehouses live in")
@click.pass_context
def run(ctx, config_file: Path, work_dir: Path, freight_file: Path, warehouses_file: Path, project: str | None):
    """
    Run the helm-update-image step.

    CONFIG_FILE is the step config ({path, images}).

    Examples:

        promostep run step.yaml --work-dir ./repo --freight freight.yaml --warehouses warehouses.yaml

        promostep run step.yaml --work-dir ./repo --freight freight.yaml --warehouses warehouses.yaml --project demo
    """
    from promostep.context import StepContext
    from promostep.schemas import FreightCollection, OriginRef
    from promostep.step import HelmImageUpdater
    from promostep.warehouse_client import FileWarehouseClient

    config = ctx.obj.get("config")
    if project is None and config is not None:
        project = config.project or None
    if not project:
        raise click.UsageError("--project is required when no default project is configured")

    freight_doc = _load_document(freight_file) or {}
    step_ctx = StepContext(
        project=project,
        work_dir=work_dir,
        warehouse_client=FileWarehouseClient(warehouses_file, default_namespace=project),
        freight=FreightCollection.from_dict(freight_doc.get("freight", {})),
        freight_requests=tuple(OriginRef.from_dict(r) for r in freight_doc.get("requests", [])),
    )

    result = HelmImageUpdater().run_promotion_step(step_ctx, _load_document(config_file))
    click.echo(json.dumps(result.to_dict(), indent=2))
    if not result.ok:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
