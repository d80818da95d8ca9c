"""Main CLI entry point."""

import json
import re
from dataclasses import dataclass
from typing import Optional

import structlog
import typer

from vana_cli.cli.report import (
    ReportOptions,
    build_no_data_report,
    build_verbose_header,
    render,
)
from vana_cli.config import ConfigStore, VanaSettings, get_settings
from vana_cli.config.store import NETWORKS, is_protected_key
from vana_cli.log import configure_logging
from vana_cli.services import CredentialResolver, RequestSigner, StatsAggregator
from vana_cli.services.errors import (
    ConfigError,
    InvalidCredentialError,
    MissingCredentialError,
    MissingEndpointError,
    UnexpectedError,
    ValidationError,
)
from vana_cli.services.schemas.stats import CombinedStatsResult
from vana_cli.utils.formatting import (
    format_config_section,
    format_title,
    is_sensitive_key,
    mask_sensitive_value,
)
from vana_cli.utils.messaging import MessageHandler, config_not_found, missing_required

logger = structlog.get_logger(__name__)

app = typer.Typer(
    name="vana",
    help="[ALPHA] Vana CLI for refiner statistics and local configuration",
    add_completion=False,
    no_args_is_help=True,
)
config_app = typer.Typer(help="Manage CLI configuration", no_args_is_help=True)
stats_app = typer.Typer(help="Query refiner statistics", no_args_is_help=True)
app.add_typer(config_app, name="config")
app.add_typer(stats_app, name="stats")

TROUBLESHOOTING_STEPS = [
    "Verify the refiner ID exists",
    "Check your private key is correct",
    "Ensure the API URLs are accessible",
    "Verify you have permission to view this refiner's stats",
]

_REFINER_ID_RE = re.compile(r"^\d+$")


@dataclass
class CliState:
    settings: VanaSettings
    store: ConfigStore


@app.callback()
def main(ctx: typer.Context) -> None:
    """Vana CLI."""
    if ctx.obj is None:
        settings = get_settings()
        ctx.obj = CliState(settings=settings, store=ConfigStore.from_settings(settings))
    configure_logging(ctx.obj.settings.log_level)


def parse_refiner_id(raw: str) -> int:
    """Parse a refiner id: decimal digits only, so negatives and blanks are rejected."""
    value = (raw or "").strip()
    if not _REFINER_ID_RE.match(value):
        raise ValidationError("Invalid refiner ID. Must be a non-negative number.")
    return int(value)


# ── stats ─────────────────────────────────────────────────────────────────────


@stats_app.command("refiner")
def refiner_stats(
    ctx: typer.Context,
    refiner_id: str = typer.Option(..., "--id", "-i", help="Refiner ID to get statistics for"),
    private_key: Optional[str] = typer.Option(
        None, "--private-key", help="Private key for authentication (overrides config)"
    ),
    query_endpoint: Optional[str] = typer.Option(
        None, "--query-endpoint", help="Query Engine API URL (optional if configured via config)"
    ),
    refine_endpoint: Optional[str] = typer.Option(
        None, "--refine-endpoint", help="Refinement Service API URL (optional if configured via config)"
    ),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output in JSON format"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show verbose output with additional details"),
    include_raw: bool = typer.Option(False, "--include-raw", help="Include raw API responses in output"),
):
    """Get comprehensive statistics for a refiner from both backends.

    Requests are signed with your wallet private key.
    """
    state: CliState = ctx.obj
    msg = MessageHandler()
    try:
        code = _run_refiner_stats(
            state,
            msg,
            refiner_id,
            private_key=private_key,
            query_endpoint=query_endpoint,
            refine_endpoint=refine_endpoint,
            json_output=json_output,
            verbose=verbose,
            include_raw=include_raw,
        )
    except Exception as e:
        logger.debug("Unhandled error in stats refiner", exc_info=True)
        msg.error(str(UnexpectedError(e)))
        msg.troubleshooting(TROUBLESHOOTING_STEPS)
        raise typer.Exit(1)
    raise typer.Exit(code)


def _run_refiner_stats(
    state: CliState,
    msg: MessageHandler,
    raw_refiner_id: str,
    private_key: Optional[str],
    query_endpoint: Optional[str],
    refine_endpoint: Optional[str],
    json_output: bool,
    verbose: bool,
    include_raw: bool,
) -> int:
    try:
        refiner_id = parse_refiner_id(raw_refiner_id)
    except ValidationError as e:
        msg.error(str(e))
        return 1

    try:
        state.store.initialize()
    except ConfigError as e:
        logger.warning("Config store unavailable", error=str(e))

    resolver = CredentialResolver(state.store)
    try:
        credentials = resolver.resolve(
            private_key=private_key,
            ingestion_endpoint=query_endpoint,
            execution_endpoint=refine_endpoint,
        )
    except MissingCredentialError:
        msg.error("No private key provided.")
        msg.examples(
            "Set private key with",
            ["vana config set wallet_private_key 63...", "or use --private-key option"],
            to_stderr=True,
        )
        return 1
    except MissingEndpointError as e:
        msg.error(str(e))
        msg.examples(
            "Set API endpoints with",
            [
                "vana config set query_engine_endpoint https://query-engine.api.com",
                "vana config set refinement_service_endpoint https://refine.api.com",
                "or use --query-endpoint and --refine-endpoint options",
            ],
            to_stderr=True,
        )
        return 1

    try:
        signer = RequestSigner(credentials.private_key)
    except InvalidCredentialError as e:
        msg.error(str(e))
        msg.examples("Update your private key with", ["vana config set wallet_private_key 63..."], to_stderr=True)
        return 1

    if verbose and not json_output:
        msg.write(*build_verbose_header(refiner_id, credentials))

    aggregator = StatsAggregator.from_credentials(credentials, timeout=state.settings.request_timeout)
    if json_output:
        result = aggregator.aggregate(refiner_id, signer)
    else:
        with msg.err.status("Fetching refiner stats..."):
            result = aggregator.aggregate(refiner_id, signer)

    if result.ingestion_error:
        msg.warning(f"Query Engine: {result.ingestion_error}")
    if result.execution_error:
        msg.warning(f"Refinement Service: {result.execution_error}")

    if not result.has_data:
        msg.warning("No data found for this refiner in either service")
        if json_output:
            typer.echo(render(result, ReportOptions(json=True)), nl=False)
        else:
            msg.write(*build_no_data_report(result))
        return 0

    _display_results(msg, result, json_output=json_output, verbose=verbose, include_raw=include_raw)

    if not json_output:
        msg.success("Refiner stats retrieved completed successfully")
        if verbose:
            msg.warning("Alpha software: Verify all data independently before making decisions")
    return 0


def _display_results(
    msg: MessageHandler,
    result: CombinedStatsResult,
    json_output: bool,
    verbose: bool,
    include_raw: bool,
) -> None:
    options = ReportOptions(json=json_output, verbose=verbose, include_raw=include_raw)
    text = render(result, options, width=msg.out.width, color=msg.out.is_terminal)
    typer.echo(text, nl=False)


# ── config ────────────────────────────────────────────────────────────────────


@config_app.command("get")
def config_get(
    ctx: typer.Context,
    key: Optional[str] = typer.Argument(None, help="Key to show; all keys when omitted"),
    secrets: bool = typer.Option(False, "--secrets", help="Include protected values from keyring"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Get configuration values."""
    state: CliState = ctx.obj
    store = state.store
    msg = MessageHandler()
    try:
        store.initialize()
        if key:
            value = store.get_value(key)
            if value is None:
                msg.error(config_not_found(key))
                raise typer.Exit(1)
            shown = value if secrets or not is_sensitive_key(key) else mask_sensitive_value(key, value)
            if json_output:
                typer.echo(json.dumps({key: shown}, indent=2))
            else:
                typer.echo(f"{key}: {shown}")
            return

        config = store.get_config() if secrets else store.get_unprotected_config()
        if json_output:
            if not secrets:
                config = {k: mask_sensitive_value(k, v) if is_sensitive_key(k) else v for k, v in config.items()}
            typer.echo(json.dumps(config, indent=2))
            return

        keys = store.keys()
        msg.write(format_title("Vana CLI Configuration"))
        msg.write(
            format_config_section(
                "Unprotected",
                f"stored in {store.config_path}",
                {k: config.get(k) for k in keys["unprotected"]},
                show_empty=False,
            )
        )
        if secrets:
            msg.write(
                format_config_section(
                    "Protected",
                    "stored in OS keyring",
                    {k: config.get(k) for k in keys["protected"]},
                    show_empty=True,
                )
            )
        else:
            msg.info("Use --secrets to view protected values")
        msg.info(f"Config file: {store.config_path}")
    except ConfigError as e:
        msg.error(str(e))
        msg.info('Use "vana config get" to see available keys')
        raise typer.Exit(1)


@config_app.command("set")
def config_set(
    ctx: typer.Context,
    key: Optional[str] = typer.Argument(None, help="Configuration key"),
    value: Optional[str] = typer.Argument(None, help="Value to store"),
    quiet: bool = typer.Option(False, "--quiet", help="Suppress output messages"),
):
    """Set a configuration value.

    Protected values (wallet_private_key) go to the OS keyring, everything else to the
    config file.
    """
    state: CliState = ctx.obj
    store = state.store
    msg = MessageHandler()

    if not key or not value:
        msg.error(missing_required("key and value"))
        msg.info("Usage: vana config set <key> <value>")
        raise typer.Exit(1)

    try:
        store.initialize()
        with msg.err.status("Setting configuration..."):
            store.set_value(key, value)
    except ConfigError as e:
        msg.error(str(e))
        if "Invalid network" in str(e):
            msg.info(f"Valid networks: {', '.join(NETWORKS)}")
        raise typer.Exit(1)

    if not quiet:
        location = "OS keyring" if is_protected_key(key) else str(store.config_path)
        msg.success(f"Set {key} in {location}")


@config_app.command("init")
def config_init(
    ctx: typer.Context,
    reset: bool = typer.Option(False, "--reset", help="Reset existing configuration to defaults"),
    quiet: bool = typer.Option(False, "--quiet", help="Suppress output messages"),
):
    """Initialize configuration with defaults."""
    state: CliState = ctx.obj
    store = state.store
    msg = MessageHandler()
    try:
        if reset:
            with msg.err.status("Resetting configuration to defaults..."):
                store.reset()
            if not quiet:
                msg.success("Configuration reset to defaults")
                msg.warning("Protected values (like private keys) have been cleared")
        else:
            with msg.err.status("Initializing configuration..."):
                store.initialize()
            if not quiet:
                msg.success("Configuration initialized")
                msg.warning("This is alpha software - only use for testing/development")

        if quiet:
            return

        config = store.get_unprotected_config()
        msg.write("\n" + format_title("Current Configuration"))
        msg.write(
            format_config_section(
                "Configuration",
                "unprotected values",
                {k: config.get(k) for k in store.keys()["unprotected"]},
            )
        )
        msg.info(f"Config file: {store.config_path}")
        msg.next_steps(
            [
                "Set your wallet private key: vana config set wallet_private_key 63...",
                "View all settings: vana config get",
                "View with secrets: vana config get --secrets",
            ]
        )
    except ConfigError as e:
        msg.error(str(UnexpectedError(e)))
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
