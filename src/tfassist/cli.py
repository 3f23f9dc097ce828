"""CLI entry point for tfassist."""

from pathlib import Path

import click
import structlog

from tfassist import __version__
from tfassist.agent import TerraformAgent, workspace_key
from tfassist.config import Settings, get_settings
from tfassist.errors import AgentError
from tfassist.history import open_store
from tfassist.prompts import (
    ASK_WORKSPACE_PREFIX,
    DIAGNOSE_DIR_PROMPT_TEMPLATE,
    DIAGNOSE_PROMPT_TEMPLATE,
    GENERATE_PROMPT_TEMPLATE,
)
from tfassist.utils.llm_client import OpenAIChatModel
from tfassist.utils.logging_setup import setup_logging

logger = structlog.get_logger(__name__)


def _run_query(ctx: click.Context, prompt: str, workspace_dir: Path | None) -> bool:
    """Build the agent from settings and run one query, streaming to stdout."""
    settings: Settings = ctx.obj["settings"]
    store = None

    try:
        if not ctx.obj["no_history"]:
            store = open_store(settings.history_db_path)
        agent = TerraformAgent(
            model=OpenAIChatModel.from_settings(settings),
            config=settings.agent_config(),
            history=store,
        )
        files_written = agent.query(prompt, workspace_dir)
    except AgentError as e:
        raise click.ClickException(str(e)) from e
    finally:
        if store is not None:
            store.close()

    click.echo()
    logger.info("Query complete", files_written=files_written)
    return files_written


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose logging")
@click.option("--no-history", is_flag=True, help="Do not read or record conversation history")
@click.pass_context
def main(ctx: click.Context, verbose: bool, no_history: bool):
    """tfassist - Local-first Terraform assistant."""
    settings = get_settings()
    if verbose:
        settings.log_level = "DEBUG"
    setup_logging(settings)
    ctx.obj = {"settings": settings, "no_history": no_history}


@main.command()
@click.argument("question")
@click.option(
    "--dir",
    "-d",
    "directory",
    type=click.Path(path_type=Path),
    help="Terraform working directory to mention as context",
)
@click.pass_context
def ask(ctx: click.Context, question: str, directory: Path | None):
    """Ask the Terraform expert a question."""
    if directory:
        question = ASK_WORKSPACE_PREFIX.format(workspace=directory) + question
    _run_query(ctx, question, None)


@main.command()
@click.argument("description")
@click.option(
    "--out",
    "-o",
    "out_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Output directory for generated .tf files",
)
@click.pass_context
def generate(ctx: click.Context, description: str, out_dir: Path):
    """Generate Terraform code from a natural language description."""
    out_dir = out_dir.resolve()
    prompt = GENERATE_PROMPT_TEMPLATE.format(out_dir=out_dir, description=description)

    if _run_query(ctx, prompt, out_dir):
        click.echo(f"Files written to: {out_dir}")
    else:
        click.echo("No files were generated.")


@main.command()
@click.option(
    "--plan",
    "-p",
    "plan_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Saved terraform plan or apply output",
)
@click.option(
    "--dir",
    "-d",
    "directory",
    type=click.Path(path_type=Path),
    help="Terraform working directory the failure came from",
)
@click.pass_context
def diagnose(ctx: click.Context, plan_file: Path | None, directory: Path | None):
    """Diagnose a terraform plan or apply failure.

    Plan output is read from --plan, or from stdin when it is piped in.
    """
    plan_output = ""
    if plan_file:
        plan_output = plan_file.read_text(encoding="utf-8", errors="replace")
    else:
        stdin = click.get_text_stream("stdin")
        if not stdin.isatty():
            plan_output = stdin.read()

    if plan_output.strip():
        prompt = DIAGNOSE_PROMPT_TEMPLATE.format(plan_output=plan_output)
    elif directory:
        prompt = DIAGNOSE_DIR_PROMPT_TEMPLATE.format(directory=directory)
    else:
        raise click.UsageError("provide --plan FILE, pipe plan output via stdin, or specify --dir")

    _run_query(ctx, prompt, None)


@main.command()
def version():
    """Print the tfassist version."""
    click.echo(f"tfassist {__version__}")


@main.command()
@click.option(
    "--dir",
    "-d",
    "directory",
    type=click.Path(path_type=Path),
    help="Workspace directory whose conversation to show (default: no workspace)",
)
@click.option("-n", "--limit", type=int, default=20, show_default=True, help="Number of turns")
@click.pass_context
def history(ctx: click.Context, directory: Path | None, limit: int):
    """Show recent conversation turns for a workspace."""
    settings: Settings = ctx.obj["settings"]
    key = workspace_key(directory.resolve() if directory else None)

    try:
        store = open_store(settings.history_db_path)
        if store is None:
            click.echo("Conversation history is disabled.")
            return
        with store:
            turns = store.recent(key, limit)
    except AgentError as e:
        raise click.ClickException(str(e)) from e

    if not turns:
        click.echo("No conversation history.")
        return

    for turn in turns:
        click.echo(f"[{turn.created_at:%Y-%m-%d %H:%M:%S}] {turn.role}: {turn.content}")


if __name__ == "__main__":
    main()
