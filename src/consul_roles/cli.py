"""Command line interface for managing Consul secret-backend roles in Vault.

QUICK START:
    export VAULT_ADDR=https://vault.example.com:8200
    export VAULT_TOKEN=hvs.xxxxx

    # Create or update a role:
    consul-roles roles apply consul_role.app --backend consul --name app --policy read-only

    # Re-read it from Vault (upgrades legacy IDs, drops vanished roles):
    consul-roles roles refresh consul_role.app

    # Adopt a role that already exists in Vault:
    consul-roles roles import consul_role.legacy consul/roles/legacy

    # Work with role IDs offline:
    consul-roles id encode consul app
    consul-roles id upgrade consul,app

ENVIRONMENT VARIABLES:
    CONSUL_ROLES_VAULT_URL     Vault server URL (or VAULT_ADDR)
    CONSUL_ROLES_VAULT_TOKEN   Vault token (or VAULT_TOKEN)
    CONSUL_ROLES_VAULT_ROLE_ID / CONSUL_ROLES_VAULT_SECRET_ID   AppRole login
    CONSUL_ROLES_STATE         State file (default: consul-roles.state.json)
"""

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from consul_roles.exceptions import InvalidRoleIdError, RoleError
from consul_roles.identity import backend_from_path, role_name_from_path, role_path, upgrade_legacy_id
from consul_roles.resource import ResourceData, RoleResource
from consul_roles.role import DEFAULT_TOKEN_TYPE, TOKEN_TYPES, ConsulRole
from consul_roles.state import DEFAULT_STATE_FILE, FileStateStore
from consul_roles.vault import VaultClient, VaultConfig, VaultError


def create_resource(quiet: bool = True) -> RoleResource:
    """Build a RoleResource talking to the Vault configured in the environment.

    Args:
        quiet: If True, suppress logging output (for CLI use)
    """
    if quiet:
        logging.disable(logging.CRITICAL)
    client = VaultClient(VaultConfig.from_env())
    return RoleResource(client)


def format_ttl(seconds: int) -> str:
    """Format a TTL in seconds to a human-readable string."""
    if seconds <= 0:
        return "-"
    elif seconds < 60:
        return f"{seconds}s"
    elif seconds < 3600:
        return f"{seconds // 60}m"
    elif seconds < 86400:
        return f"{seconds // 3600}h"
    else:
        return f"{seconds // 86400}d"


def print_record(address: str, record: ResourceData, format: str = "table") -> None:
    if format == "json":
        print(json.dumps({address: record.to_dict()}, indent=2))
        return

    role = record.role
    print(f"{address}:")
    print(f"  id:               {record.id or '(none)'}")
    print(f"  name:             {role.name}")
    print(f"  {role.backend_key + ':':<17} {role.backend}")
    print(f"  policies:         {', '.join(role.policies) or '-'}")
    print(f"  consul_roles:     {', '.join(role.consul_roles) or '-'}")
    print(f"  consul_namespace: {role.consul_namespace or '-'}")
    print(f"  partition:        {role.partition or '-'}")
    print(f"  ttl:              {format_ttl(role.ttl)}")
    print(f"  max_ttl:          {format_ttl(role.max_ttl)}")
    print(f"  token_type:       {role.token_type}")
    print(f"  local:            {str(role.local).lower()}")


# ============================================================================
# roles commands
# ============================================================================


def _persist_upgraded_id(store: FileStateStore, address: str, record: ResourceData) -> None:
    """Write a legacy ID back in its upgraded form before touching Vault."""
    upgraded = upgrade_legacy_id(record.id)
    if upgraded != record.id:
        record.id = upgraded
        store.put(address, record)


def cmd_roles_apply(
    resource: RoleResource, store: FileStateStore, address: str, role: ConsulRole
) -> int:
    existing = store.get(address)
    if existing is None:
        record = ResourceData(role=role)
        action = "Created"
    else:
        _persist_upgraded_id(store, address, existing)
        record = ResourceData(role=role, id=existing.id)
        role.backend_key = existing.role.backend_key
        action = "Updated"

    try:
        if existing is None:
            resource.create(record)
        else:
            resource.update(record)
    except RoleError:
        if record.id and (existing is None or record.id != existing.id):
            # Written to Vault but not read back: keep the handle
            store.put(address, record)
        elif not record.id and existing is not None:
            # Old role deleted during replacement, new one never written
            store.remove(address)
        raise

    store.put(address, record)
    print(f"{action} {address}: {record.id}")
    return 0


def cmd_roles_refresh(resource: RoleResource, store: FileStateStore, address: str) -> int:
    record = store.get(address)
    if record is None:
        print(f"ERROR: No resource '{address}' in state", file=sys.stderr)
        return 1

    _persist_upgraded_id(store, address, record)
    try:
        found = resource.refresh(record)
    except InvalidRoleIdError:
        store.remove(address)
        raise

    if not found:
        store.remove(address)
        print(f"Role for {address} no longer exists; removed from state")
        return 0

    store.put(address, record)
    print(f"Refreshed {address}: {record.id}")
    return 0


def cmd_roles_destroy(resource: RoleResource, store: FileStateStore, address: str) -> int:
    record = store.get(address)
    if record is None:
        print(f"ERROR: No resource '{address}' in state", file=sys.stderr)
        return 1

    _persist_upgraded_id(store, address, record)
    resource.delete(record)
    store.remove(address)
    print(f"Destroyed {address}: {record.id}")
    return 0


def cmd_roles_import(
    resource: RoleResource, store: FileStateStore, address: str, role_id: str
) -> int:
    if store.exists(address):
        print(f"ERROR: Resource '{address}' is already managed", file=sys.stderr)
        return 1

    record = resource.import_role(role_id)
    store.put(address, record)
    print(f"Imported {address}: {record.id}")
    return 0


def cmd_roles_show(store: FileStateStore, address: str, format: str = "table") -> int:
    record = store.get(address)
    if record is None:
        print(f"ERROR: No resource '{address}' in state", file=sys.stderr)
        return 1
    print_record(address, record, format)
    return 0


def cmd_roles_list(store: FileStateStore, format: str = "table") -> int:
    records = store.list_all()

    if format == "json":
        print(json.dumps({a: r.to_dict() for a, r in sorted(records.items())}, indent=2))
        return 0

    if not records:
        print("No roles in state")
        return 0

    print(f"\n{'Address':<30} {'ID':<40} {'Token type':<12}")
    print("-" * 84)
    for address, record in sorted(records.items()):
        print(f"{address:<30} {record.id:<40} {record.role.token_type:<12}")
    print(f"\nTotal: {len(records)} roles")
    return 0


# ============================================================================
# id commands
# ============================================================================


def cmd_id_encode(backend: str, name: str) -> int:
    print(role_path(backend, name))
    return 0


def cmd_id_decode(role_id: str, format: str = "table") -> int:
    backend = backend_from_path(role_id)
    name = role_name_from_path(role_id)
    if format == "json":
        print(json.dumps({"backend": backend, "name": name}))
    else:
        print(f"backend: {backend}")
        print(f"name:    {name}")
    return 0


def cmd_id_upgrade(role_id: str) -> int:
    print(upgrade_legacy_id(role_id))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="consul-roles",
        description="Manage Consul secret-backend roles in HashiCorp Vault",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
EXAMPLES:
  Create a role bound to two Consul policies:
    %(prog)s roles apply consul_role.app --backend consul --name app \\
        --policy read-only --policy kv-write --ttl 3600

  Create a role bound to Consul roles in an admin partition:
    %(prog)s roles apply consul_role.ops --backend consul --name ops \\
        --consul-role ops --partition prod

  Convert an old-style ID:
    %(prog)s id upgrade consul,app

ENVIRONMENT:
  Vault: CONSUL_ROLES_VAULT_URL / VAULT_ADDR, CONSUL_ROLES_VAULT_TOKEN / VAULT_TOKEN
  State: CONSUL_ROLES_STATE
        """,
    )
    parser.add_argument(
        "--state",
        default=os.environ.get("CONSUL_ROLES_STATE", DEFAULT_STATE_FILE),
        help="State file holding managed roles. Default: %(default)s",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable logging output for debugging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command category")

    # -------------------------------------------------------------------------
    # ROLES subcommand
    # -------------------------------------------------------------------------
    roles_parser = subparsers.add_parser("roles", help="Manage Consul roles in Vault")
    roles_sub = roles_parser.add_subparsers(dest="subcommand", help="Role operation")

    apply = roles_sub.add_parser("apply", help="Create or update a role")
    apply.add_argument("address", help="Resource address (e.g., consul_role.app)")
    apply.add_argument("--name", required=True, help="Role name")
    apply.add_argument("--backend", required=True, help="Consul secrets engine mount path")
    apply.add_argument(
        "--policy", dest="policies", action="append", default=[],
        help="Consul policy to attach (repeatable)",
    )
    apply.add_argument(
        "--consul-role", dest="consul_roles", action="append", default=[],
        help="Consul role to attach (repeatable, Vault 1.10+)",
    )
    apply.add_argument("--consul-namespace", help="Consul namespace for generated tokens")
    apply.add_argument("--partition", help="Consul admin partition for generated tokens")
    apply.add_argument("--ttl", type=int, default=0, help="Lease TTL in seconds")
    apply.add_argument("--max-ttl", type=int, default=0, help="Maximum lease TTL in seconds")
    apply.add_argument(
        "--token-type", choices=TOKEN_TYPES, default=DEFAULT_TOKEN_TYPE,
        help="Type of token to create. Default: %(default)s",
    )
    apply.add_argument(
        "--local", action="store_true",
        help="Create tokens local to the datacenter instead of replicated",
    )

    refresh = roles_sub.add_parser("refresh", help="Re-read a role from Vault")
    refresh.add_argument("address", help="Resource address")

    destroy = roles_sub.add_parser("destroy", help="Delete a role from Vault")
    destroy.add_argument("address", help="Resource address")

    import_ = roles_sub.add_parser("import", help="Adopt an existing role")
    import_.add_argument("address", help="Resource address")
    import_.add_argument("id", help="Role ID (<backend>/roles/<name>)")

    show = roles_sub.add_parser("show", help="Show a role from state")
    show.add_argument("address", help="Resource address")
    show.add_argument("--format", choices=["table", "json"], default="table")

    list_ = roles_sub.add_parser("list", help="List roles in state")
    list_.add_argument("--format", choices=["table", "json"], default="table")

    # -------------------------------------------------------------------------
    # ID subcommand
    # -------------------------------------------------------------------------
    id_parser = subparsers.add_parser("id", help="Encode, decode and upgrade role IDs")
    id_sub = id_parser.add_subparsers(dest="subcommand", help="ID operation")

    encode = id_sub.add_parser("encode", help="Build a role ID from backend and name")
    encode.add_argument("backend", help="Consul secrets engine mount path")
    encode.add_argument("name", help="Role name")

    decode = id_sub.add_parser("decode", help="Split a role ID into backend and name")
    decode.add_argument("id", help="Role ID")
    decode.add_argument("--format", choices=["table", "json"], default="table")

    upgrade = id_sub.add_parser("upgrade", help="Convert a <backend>,<name> ID")
    upgrade.add_argument("id", help="Role ID")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command or not args.subcommand:
        parser.print_help()
        return 1

    try:
        if args.command == "id":
            if args.subcommand == "encode":
                return cmd_id_encode(args.backend, args.name)
            elif args.subcommand == "decode":
                return cmd_id_decode(args.id, args.format)
            elif args.subcommand == "upgrade":
                return cmd_id_upgrade(args.id)

        store = FileStateStore(args.state)

        if args.subcommand == "show":
            return cmd_roles_show(store, args.address, args.format)
        elif args.subcommand == "list":
            return cmd_roles_list(store, args.format)

        resource = create_resource(quiet=not args.verbose)

        if args.subcommand == "apply":
            role = ConsulRole(
                name=args.name,
                backend=args.backend,
                policies=args.policies,
                consul_roles=args.consul_roles,
                consul_namespace=args.consul_namespace,
                partition=args.partition,
                max_ttl=args.max_ttl,
                ttl=args.ttl,
                token_type=args.token_type,
                local=args.local,
            )
            return cmd_roles_apply(resource, store, args.address, role)
        elif args.subcommand == "refresh":
            return cmd_roles_refresh(resource, store, args.address)
        elif args.subcommand == "destroy":
            return cmd_roles_destroy(resource, store, args.address)
        elif args.subcommand == "import":
            return cmd_roles_import(resource, store, args.address, args.id)
    except (RoleError, VaultError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
