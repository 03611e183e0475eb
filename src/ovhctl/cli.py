#!/usr/bin/env python3
"""ovhctl - command line interface to the OVHcloud API

Commands:

    ovhctl connect
    ovhctl cloud tenant list
    ovhctl cloud instance list TENANT
    ovhctl cloud loadbalancer list|create|delete -t TENANT ...
    ovhctl dedicated server list
    ovhctl domain zone list
    ovhctl domain record list|sync|delete|refresh ZONE ...

Every listing command accepts `-o short|wide|json|yaml`.

Environment variables:

    LOG_LEVEL                  DEBUG, INFO, WARNING, ERROR (overrides -v)
    OVHCTL_ENDPOINT            API endpoint (default: https://eu.api.ovh.com/1.0)
    OVHCTL_APPLICATION_KEY     Application key
    OVHCTL_APPLICATION_SECRET  Application secret
    OVHCTL_CONSUMER_KEY        Consumer key, obtained with `ovhctl connect`
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Callable, List, Optional

from . import __version__
from .client import OvhClient
from .collectors import (
    DEFAULT_REDIRECTION,
    create_loadbalancer,
    delete_loadbalancer,
    delete_record,
    list_instances,
    list_loadbalancers,
    list_records,
    list_servers,
    list_tenants,
    list_zones,
    refresh_zone,
    request_credential,
)
from .config import Configuration, load_configuration
from .errors import ConfigurationError, OvhctlError
from .models import Instance, LoadBalancer, Record, Server, Tenant, Zone
from .output import OutputFormat, render, render_changes
from .sync import Network, parse_networks, sync_zone

logger = logging.getLogger(__name__)

Handler = Callable[[argparse.Namespace, Configuration], None]

# =============================================================================
# Logging Setup
# =============================================================================


def setup_logging(verbose: int) -> None:
    levels = [logging.WARNING, logging.INFO, logging.DEBUG]
    level = levels[min(verbose, len(levels) - 1)]

    log_level = os.getenv("LOG_LEVEL", "")
    if log_level:
        level = getattr(logging, log_level.upper(), level)

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


# =============================================================================
# Argument Types
# =============================================================================


def _output_format(value: str) -> OutputFormat:
    try:
        return OutputFormat.parse(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def _network(value: str) -> Network:
    try:
        return parse_networks([value])[0]
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"'{value}' is not a valid cidr, {e}")


def _client(config: Configuration) -> OvhClient:
    return OvhClient.from_credential(config.credential())


# =============================================================================
# Handlers
# =============================================================================


def cmd_connect(args: argparse.Namespace, config: Configuration) -> None:
    client = OvhClient(config.endpoint, config.application_key, config.application_secret)
    validation = request_credential(client, args.redirection)

    print(f"Please login on this url '{validation.validation_url}' before going further")
    print(
        f"Then, please add the following credentials '{validation.consumer_key}' "
        "as consumer key in configuration"
    )


def cmd_tenant_list(args: argparse.Namespace, config: Configuration) -> None:
    tenants = list_tenants(_client(config))
    print(render(tenants, Tenant, args.output))


def cmd_instance_list(args: argparse.Namespace, config: Configuration) -> None:
    instances = list_instances(_client(config), args.tenant)
    print(render(instances, Instance, args.output))


def cmd_loadbalancer_list(args: argparse.Namespace, config: Configuration) -> None:
    loadbalancers = list_loadbalancers(_client(config), args.tenant)
    print(render(loadbalancers, LoadBalancer, args.output))


def cmd_loadbalancer_create(args: argparse.Namespace, config: Configuration) -> None:
    loadbalancer = create_loadbalancer(_client(config), args.tenant, args.region)
    print(render([loadbalancer], LoadBalancer, args.output))


def cmd_loadbalancer_delete(args: argparse.Namespace, config: Configuration) -> None:
    client = _client(config)
    delete_loadbalancer(client, args.tenant, args.id)
    print(render(list_loadbalancers(client, args.tenant), LoadBalancer, args.output))


def cmd_server_list(args: argparse.Namespace, config: Configuration) -> None:
    servers = list_servers(_client(config))
    print(render(servers, Server, args.output))


def cmd_zone_list(args: argparse.Namespace, config: Configuration) -> None:
    zones = list_zones(_client(config))
    print(render(zones, Zone, args.output))


def cmd_record_list(args: argparse.Namespace, config: Configuration) -> None:
    records = list_records(_client(config), args.zone)
    print(render(records, Record, args.output))


def cmd_record_sync(args: argparse.Namespace, config: Configuration) -> None:
    if args.not_in_cidrs:
        logger.info(f"Excluded networks: {', '.join(str(n) for n in args.not_in_cidrs)}")

    result = sync_zone(
        _client(config),
        args.zone,
        args.not_in_cidrs,
        dry_run=args.dry_run,
    )

    if not result.applied:
        print(
            render_changes(result.changes.to_delete, result.changes.to_create, Record, args.output)
        )
        return
    print(render(result.records, Record, args.output))


def cmd_record_delete(args: argparse.Namespace, config: Configuration) -> None:
    delete_record(_client(config), args.zone, args.id)


def cmd_record_refresh(args: argparse.Namespace, config: Configuration) -> None:
    refresh_zone(_client(config), args.zone)


# =============================================================================
# Parser
# =============================================================================


def _add_output(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-o",
        "--output",
        type=_output_format,
        default=OutputFormat.SHORT,
        help="Choose the output format: short, wide, json or yaml (default: short)",
    )


def _add_command(subparsers, name: str, alias: str, handler: Handler, help_text: str):
    parser = subparsers.add_parser(name, aliases=[alias], help=help_text)
    parser.set_defaults(func=handler)
    return parser


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ovhctl",
        description="A command line interface to interact with the OVHcloud API",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v", dest="verbose", action="count", default=0, help="Increase log verbosity"
    )
    parser.add_argument(
        "-t", "--check", action="store_true", help="Validate the configuration and exit"
    )
    parser.add_argument("-c", "--config", help="Path to the configuration file")

    commands = parser.add_subparsers(dest="command", metavar="COMMAND")

    # connect
    connect = commands.add_parser("connect", help="Login to the ovh api")
    connect.add_argument(
        "--redirection",
        default=DEFAULT_REDIRECTION,
        help="URL the browser is sent to once the consumer key is validated",
    )
    connect.set_defaults(func=cmd_connect)

    # cloud
    cloud = commands.add_parser(
        "cloud", aliases=["c"], help="Manage cloud resources across the ovh api"
    )
    cloud_commands = cloud.add_subparsers(dest="cloud_command", metavar="RESOURCE", required=True)

    tenant = cloud_commands.add_parser("tenant", aliases=["t"], help="Manage tenants")
    tenant_commands = tenant.add_subparsers(dest="action", metavar="ACTION", required=True)
    _add_output(_add_command(tenant_commands, "list", "l", cmd_tenant_list, "List tenants"))

    instance = cloud_commands.add_parser("instance", aliases=["i"], help="Manage instances")
    instance_commands = instance.add_subparsers(dest="action", metavar="ACTION", required=True)
    instance_list = _add_command(instance_commands, "list", "l", cmd_instance_list, "List instances")
    instance_list.add_argument("tenant", help="Tenant to use")
    _add_output(instance_list)

    loadbalancer = cloud_commands.add_parser(
        "loadbalancer", aliases=["l"], help="Manage load balancers"
    )
    loadbalancer_commands = loadbalancer.add_subparsers(
        dest="action", metavar="ACTION", required=True
    )
    lb_list = _add_command(
        loadbalancer_commands, "list", "l", cmd_loadbalancer_list, "List load balancers in tenant"
    )
    lb_create = _add_command(
        loadbalancer_commands, "create", "c", cmd_loadbalancer_create, "Create a load balancer"
    )
    lb_create.add_argument("region", help="Region in which to create the load balancer")
    lb_delete = _add_command(
        loadbalancer_commands, "delete", "d", cmd_loadbalancer_delete, "Delete a load balancer"
    )
    lb_delete.add_argument("id", help="Load balancer identifier")
    for lb_parser in (lb_list, lb_create, lb_delete):
        lb_parser.add_argument(
            "-t", "--tenant", required=True, help="Tenant on which we scope the operation"
        )
        _add_output(lb_parser)

    # dedicated
    dedicated = commands.add_parser(
        "dedicated", aliases=["de"], help="Manage dedicated infrastructure"
    )
    dedicated_commands = dedicated.add_subparsers(
        dest="dedicated_command", metavar="RESOURCE", required=True
    )
    server = dedicated_commands.add_parser("server", aliases=["s"], help="Manage bare-metal servers")
    server_commands = server.add_subparsers(dest="action", metavar="ACTION", required=True)
    _add_output(_add_command(server_commands, "list", "l", cmd_server_list, "List servers"))

    # domain
    domain = commands.add_parser("domain", aliases=["do"], help="Manage domain across the ovh api")
    domain_commands = domain.add_subparsers(
        dest="domain_command", metavar="RESOURCE", required=True
    )

    zone = domain_commands.add_parser("zone", aliases=["z"], help="Manage domain zones")
    zone_commands = zone.add_subparsers(dest="action", metavar="ACTION", required=True)
    _add_output(_add_command(zone_commands, "list", "l", cmd_zone_list, "List domain zones"))

    record = domain_commands.add_parser("record", aliases=["r"], help="Manage domain records")
    record_commands = record.add_subparsers(dest="action", metavar="ACTION", required=True)

    record_list = _add_command(record_commands, "list", "l", cmd_record_list, "List domain records")
    record_list.add_argument("zone", help="Zone that contains domain records")
    _add_output(record_list)

    record_sync = _add_command(
        record_commands,
        "sync",
        "s",
        cmd_record_sync,
        "Synchronise domain records with public cloud instances",
    )
    record_sync.add_argument("zone", help="Zone that contains domain records")
    _add_output(record_sync)
    record_sync.add_argument(
        "-n",
        "--not-in-cidrs",
        type=_network,
        action="append",
        default=[],
        metavar="CIDR",
        help="Network to discard from the sync (repeatable)",
    )
    record_sync.add_argument(
        "--dry-run",
        action="store_true",
        help="Show the records that would be deleted and created without changing anything",
    )

    record_delete = _add_command(
        record_commands, "delete", "d", cmd_record_delete, "Delete a domain record"
    )
    record_delete.add_argument("zone", help="Zone that contains domain records")
    record_delete.add_argument("id", type=int, help="Record identifier")

    record_refresh = _add_command(
        record_commands, "refresh", "r", cmd_record_refresh, "Refresh domain records"
    )
    record_refresh.add_argument("zone", help="Zone that contains domain records")

    return parser


# =============================================================================
# Main
# =============================================================================


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if not args.check and not getattr(args, "func", None):
        parser.print_help()
        return

    try:
        config = load_configuration(args.config)
    except ConfigurationError as e:
        logger.critical(f"could not load configuration: {e}")
        sys.exit(1)

    if args.check:
        logger.debug(f"Arguments: {args}")
        logger.debug(f"Configuration loaded from: {', '.join(config.sources) or '<defaults>'}")
        logger.info(f"Endpoint: {config.endpoint}")
        print("Configuration is healthy!")
        return

    if not config.consumer_key and args.command != "connect":
        logger.warning(
            "Please login to the ovh api by using 'ovhctl connect' before beginning"
        )

    try:
        args.func(args, config)
    except OvhctlError as e:
        logger.critical(f"could not execute command: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted")
        sys.exit(130)


if __name__ == "__main__":
    main()
