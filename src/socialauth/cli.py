"""Command line helpers for trying a provider configuration by hand."""

import asyncio
import json
import logging
import os
import traceback
from typing import Any, Dict

import click

from socialauth.config import load_provider_config
from socialauth.contracts import AccessGrant
from socialauth.providers import create_provider, get_supported_providers


def get_env_flag(env_var: str, default: bool = False) -> bool:
    """Get a boolean flag from an environment variable.

    Returns:
        True if the environment variable is set to "1", "true", or "yes" (case insensitive)
    """
    value = os.environ.get(env_var, "").lower()
    return value in ("1", "true", "yes") if value else default


def configure_logging(debug: bool = False) -> None:
    """Configure the root logger for CLI use.

    Args:
        debug: Whether to enable debug logging
    """
    if not debug:
        debug = get_env_flag("SOCIALAUTH_DEBUG")

    log_level = logging.DEBUG if debug else logging.WARNING

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove any existing handlers to avoid duplicate messages
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter("%(levelname)s:%(name)s:%(message)s"))
    root_logger.addHandler(handler)


def format_error(error: Exception, debug: bool = False) -> Dict[str, Any]:
    error_info: Dict[str, Any] = {"error": str(error)}
    code = getattr(error, "error", None)
    if isinstance(code, str):
        error_info["code"] = code

    if debug:
        error_info["traceback"] = traceback.format_exc()
        error_info["type"] = error.__class__.__name__

    return error_info


def output_error(error: Exception, json_output: bool = False, debug: bool = False) -> None:
    """Print an error in JSON or human-readable form and abort."""
    error_info = format_error(error, debug)

    if json_output:
        click.echo(json.dumps({"status": "error", **error_info}, indent=2))
    else:
        click.echo(f"Error: {error_info['error']}", err=True)
        if debug and "traceback" in error_info:
            click.echo("\nTraceback:", err=True)
            click.echo(error_info["traceback"], err=True)

    raise click.Abort()


@click.group()
def cli() -> None:
    """socialauth provider tools"""


@cli.command(name="authorize-url")
@click.option(
    "--config",
    "config_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Provider YAML config file",
)
@click.option(
    "--provider",
    default="stackexchange",
    type=click.Choice(get_supported_providers()),
    show_default=True,
    help="Provider id",
)
@click.option("--redirect-uri", required=True, help="Callback URL registered with the provider")
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
@click.option("--debug", is_flag=True, help="Show detailed debug information")
def authorize_url(
    config_path: str, provider: str, redirect_uri: str, json_output: bool, debug: bool
) -> None:
    """Print the login URL for a provider and the state it expects back.

    \b
    Example:
        socialauth authorize-url --config oauth.yml --redirect-uri http://localhost:8080/cb
    """
    configure_logging(debug)
    try:
        adapter = create_provider(load_provider_config(config_path, provider))
        url = adapter.get_login_redirect_url(redirect_uri)
    except Exception as e:
        output_error(e, json_output, debug)
        return

    state = getattr(adapter, "state", None)
    if json_output:
        click.echo(json.dumps({"status": "ok", "result": {"url": url, "state": state}}, indent=2))
    else:
        click.echo(url)
        if state:
            click.echo(f"state: {state}", err=True)


@cli.command(name="profile")
@click.option(
    "--config",
    "config_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Provider YAML config file",
)
@click.option(
    "--provider",
    default="stackexchange",
    type=click.Choice(get_supported_providers()),
    show_default=True,
    help="Provider id",
)
@click.option("--access-token", required=True, help="An access token issued by the provider")
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
@click.option("--debug", is_flag=True, help="Show detailed debug information")
def profile(
    config_path: str, provider: str, access_token: str, json_output: bool, debug: bool
) -> None:
    """Fetch the normalized user profile for an existing access token."""
    configure_logging(debug)
    try:
        config = load_provider_config(config_path, provider)
        adapter = create_provider(config)
        adapter.set_access_grant(AccessGrant(access_token=access_token, provider_id=config.id))
        user_profile = asyncio.run(adapter.get_user_profile())
    except KeyboardInterrupt:
        if not json_output:
            click.echo("\nOperation cancelled by user", err=True)
        raise click.Abort()
    except Exception as e:
        output_error(e, json_output, debug)
        return

    data = user_profile.model_dump(exclude_none=True) if user_profile is not None else {}
    if json_output:
        click.echo(json.dumps({"status": "ok", "result": data}, indent=2, default=str))
    else:
        for key, value in data.items():
            click.echo(f"{key}: {value}")
