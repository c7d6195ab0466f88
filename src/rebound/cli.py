"""CLI interface for Rebound"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import click

from rebound.application.rest_client import RestClient
from rebound.domain.config.request import RequestConfig
from rebound.infrastructure.cancellation import CancellationToken
from rebound.infrastructure.config.config_manager import ConfigManager, ConfigurationError
from rebound.infrastructure.events.logging_sink import JSONFormatter

logger = logging.getLogger(__name__)

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(verbose: bool = False, fmt: str = "text", level_name: str = "INFO") -> None:
    """Setup logging configuration"""
    level = logging.DEBUG if verbose else getattr(logging, level_name.upper(), logging.INFO)
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logging.basicConfig(level=level, handlers=[handler], force=True)
    logging.getLogger().setLevel(level)


def _die(message: str, verbose: bool = False, exc: Optional[Exception] = None) -> None:
    """Exit with a user-friendly error message"""
    if exc is not None:
        logger.error(message, exc_info=exc if verbose else None)
    else:
        logger.error(message)
    raise click.ClickException(message)


def parse_headers(values: Tuple[str, ...]) -> Dict[str, str]:
    """Parse ``Name: value`` header options

    Args:
        values: Raw header strings

    Returns:
        Header mapping

    Raises:
        click.BadParameter: If a header has no colon or an empty name
    """
    headers: Dict[str, str] = {}
    for raw in values:
        name, sep, value = raw.partition(":")
        if not sep or not name.strip():
            raise click.BadParameter(f"expected 'Name: value', got {raw!r}", param_hint="--header")
        headers[name.strip()] = value.strip()
    return headers


def parse_payload(data: Optional[str]) -> Any:
    """Parse the request body option as JSON

    Args:
        data: JSON text, ``@path`` to read it from a file, or None

    Returns:
        Decoded payload or None
    """
    if data is None:
        return None
    if data.startswith("@"):
        try:
            data = Path(data[1:]).read_text(encoding="utf-8")
        except OSError as e:
            raise click.BadParameter(f"cannot read request body: {e}", param_hint="--data") from e
    try:
        return json.loads(data)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"request body is not valid JSON: {e}", param_hint="--data") from e


def _build_request_config(
    base: RequestConfig,
    url: Optional[str],
    method: Optional[str],
    headers: Dict[str, str],
    timeout: Optional[float],
    max_attempts: Optional[int],
    interval: Optional[float],
    backoff_rate: Optional[float],
) -> RequestConfig:
    """Apply CLI overrides on top of the loaded request configuration"""
    config = base
    if url:
        config = config.with_url(url)
    if method:
        config = config.with_method(method)
    if headers:
        merged = dict(config.headers)
        merged.update(headers)
        config = config.with_headers(merged)
    if timeout is not None:
        config = config.with_timeout(timeout)
    if max_attempts is not None:
        config = config.with_max_attempts(max_attempts)
    if interval is not None:
        config = config.with_interval_seconds(interval)
    if backoff_rate is not None:
        config = config.with_backoff_rate(backoff_rate)
    return config


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to .rebound.yml config file",
)
@click.pass_context
def cli(ctx, verbose: bool, config: Path):
    """Rebound - HTTP client with retry and exponential backoff"""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose


@cli.command()
@click.argument("url", required=False)
@click.option("--method", "-X", type=str, help="HTTP method. Overrides config.")
@click.option("--header", "-H", "header", multiple=True, help="Header as 'Name: value' (repeatable)")
@click.option("--data", "-d", type=str, help="JSON request body, or @file to read it from a file")
@click.option("--timeout", type=click.FloatRange(min=0), help="Per-attempt timeout in seconds (0 = none)")
@click.option("--max-attempts", type=click.IntRange(min=1), help="Total attempts including the first")
@click.option("--interval", type=click.FloatRange(min=0), help="Base backoff interval in seconds")
@click.option("--backoff-rate", type=click.FloatRange(min=0), help="Exponential backoff multiplier")
@click.option("--deadline", type=click.FloatRange(min=0, min_open=True), help="Overall deadline in seconds")
@click.option(
    "--log-format",
    type=click.Choice(["text", "json"], case_sensitive=False),
    help="Log output format. Overrides config.",
)
@click.pass_context
def call(
    ctx,
    url: Optional[str],
    method: Optional[str],
    header: Tuple[str, ...],
    data: Optional[str],
    timeout: Optional[float],
    max_attempts: Optional[int],
    interval: Optional[float],
    backoff_rate: Optional[float],
    deadline: Optional[float],
    log_format: Optional[str],
):
    """Call an HTTP endpoint, retrying server errors with backoff.

    URL: Target endpoint (default: from config or REBOUND_URL)
    """
    verbose = ctx.obj.get("verbose", False)

    try:
        config_manager = ConfigManager(config_path=ctx.obj.get("config_path"))
    except ConfigurationError as e:
        _die(str(e), verbose=verbose, exc=e)

    logging_config = config_manager.get_logging_config()
    setup_logging(verbose, (log_format or logging_config.format).lower(), logging_config.level)

    request_config = _build_request_config(
        config_manager.get_request_config(),
        url,
        method,
        parse_headers(header),
        timeout,
        max_attempts,
        interval,
        backoff_rate,
    )
    if not request_config.url:
        _die("No URL given. Pass it as an argument or set request.url / REBOUND_URL.")

    payload = parse_payload(data)
    token = CancellationToken.with_timeout(deadline or config_manager.get_deadline())

    logger.info(f"Calling {request_config.method} {request_config.url}")
    outcome = RestClient(request_config).do(payload, cancel=token)

    if not outcome.is_successful:
        _die(f"Request failed (status {outcome.status}): {outcome.error}", verbose=verbose, exc=outcome.error)

    click.echo(f"Status: {outcome.status}")
    if outcome.value is not None:
        click.echo(json.dumps(outcome.value, indent=2, ensure_ascii=False))


def main():
    """Main entry point"""
    cli(obj={})


if __name__ == "__main__":
    main()
