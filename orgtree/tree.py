"""
Build the OU/account tree of an AWS Organization.

Every OU is walked in its own thread.  At each OU the accounts listing runs
concurrently with the child OU listing and the walks of the child OUs.
Threads hand their results back to the parent; nothing is shared between
them.  If any call fails anywhere in the tree, all threads are waited for
and the first error is raised.  No partial tree is ever returned.
"""

from collections import namedtuple

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError

from orgtree.context import Context, RemoteCallError
from orgtree.directory import (
    list_roots,
    list_child_ou_ids,
    describe_ou,
    list_accounts_for_parent,
    describe_organization,
)
from orgtree.models import Account, OrganizationalUnit, Organization
from orgtree.tags import fetch_account_tags, apply_tags
from orgtree.utils import (
    start_task,
    queue_threads,
    collect_results,
    drain,
    get_assume_role_credentials,
)


# What walk_ou() hands back to its caller
WalkResult = namedtuple('WalkResult', ['org_units', 'accounts', 'management_account'])


def insert_by_name(log, mapping, name, value, kind, parent_id):
    """Name collisions are last-write-wins.  Log them."""
    if name in mapping:
        log.warning("duplicate %s name '%s' under parent %s: keeping %s, dropping %s" %
                (kind, name, parent_id, value.id, mapping[name].id))
    mapping[name] = value


def scan_accounts(log, ctx, org_client, parent_id, management_account_id):
    """
    List the accounts directly under 'parent_id'.  Returns a tuple of
    (accounts keyed by name, the management account or None).
    """
    accounts = {}
    management_account = None
    for item in list_accounts_for_parent(log, ctx, org_client, parent_id):
        account = Account.from_response(item)
        insert_by_name(log, accounts, account.name, account, 'account', parent_id)
        if account.id == management_account_id:
            management_account = account
    return accounts, management_account


def walk_child_ou(ou_id, log, ctx, org_client, management_account_id):
    """
    Thread worker.  Describe OU 'ou_id' and walk it.  Returns a tuple of
    (fully resolved OrganizationalUnit, management account or None).
    """
    ou = describe_ou(log, ctx, org_client, ou_id)
    result = walk_ou(log, ctx, org_client, ou_id, management_account_id)
    org_unit = OrganizationalUnit(
            name=ou['Name'],
            id=ou['Id'],
            org_units=result.org_units,
            accounts=result.accounts)
    return org_unit, result.management_account


def walk_ou(log, ctx, org_client, parent_id, management_account_id):
    """
    Recursively walk the OU tree under 'parent_id'.  Return a WalkResult
    holding the child OUs and the direct accounts of 'parent_id'.  Accounts
    of child OUs stay with their child OU.
    """
    accounts_task = start_task(log, scan_accounts,
            f_args=(log, ctx, org_client, parent_id, management_account_id))
    try:
        child_ids = list_child_ou_ids(log, ctx, org_client, parent_id)
    except Exception as e:
        raise drain(e, [accounts_task])

    child_results = queue_threads(log, child_ids, walk_child_ou,
            f_args=(log, ctx, org_client, management_account_id))
    accounts_result = accounts_task.result()
    collect_results(child_results + [accounts_result])

    # assemble in listing order so name collisions resolve the same way every run
    position = {ou_id: i for i, ou_id in enumerate(child_ids)}
    child_results.sort(key=lambda r: position[r.item])
    org_units = {}
    management_account = None
    for r in child_results:
        org_unit, child_management_account = r.value
        insert_by_name(log, org_units, org_unit.name, org_unit, 'OU', parent_id)
        if management_account is None:
            management_account = child_management_account
    accounts, own_management_account = accounts_result.value
    if management_account is None:
        management_account = own_management_account
    log.debug('parent_id: %s done. %s OU, %s accounts' %
            (parent_id, len(org_units), len(accounts)))
    return WalkResult(org_units, accounts, management_account)


def walk_root(root, log, ctx, org_client, management_account_id):
    """Thread worker.  Walk the tree under one organization root."""
    result = walk_ou(log, ctx, org_client, root['Id'], management_account_id)
    org_unit = OrganizationalUnit(
            name=root['Name'],
            id=root['Id'],
            org_units=result.org_units,
            accounts=result.accounts)
    return org_unit, result.management_account


def build_tree(log, ctx, org_client):
    """
    Query the deployed AWS Organization and return it as an Organization.
    Account tags are left empty.
    """
    org_task = start_task(log, describe_organization, f_args=(log, ctx, org_client))
    try:
        roots = list_roots(log, ctx, org_client)
    except Exception as e:
        raise drain(e, [org_task])
    org = org_task.value()
    management_account_id = org.get('MasterAccountId')

    root_results = queue_threads(log, roots, walk_root,
            f_args=(log, ctx, org_client, management_account_id))
    collect_results(root_results)
    position = {root['Id']: i for i, root in enumerate(roots)}
    root_results.sort(key=lambda r: position[r.item['Id']])

    org_units = {}
    management_account = None
    for r in root_results:
        org_unit, root_management_account = r.value
        insert_by_name(log, org_units, org_unit.name, org_unit, 'root', org['Id'])
        if management_account is None:
            management_account = root_management_account
    if management_account is None:
        log.warning("management account %s not found in organization %s" %
                (management_account_id, org['Id']))
    return Organization(
            id=org['Id'],
            management_account=management_account,
            org_units=org_units)


def get_org_tree(log, ctx, org_client, tagging_client):
    """
    Build the org tree and fetch account tags concurrently.  Return the
    tagged Organization.  Raise the first error if either fails.
    """
    tags_task = start_task(log, fetch_account_tags, f_args=(log, ctx, tagging_client))
    try:
        organization = build_tree(log, ctx, org_client)
    except Exception as e:
        ctx.cancel()
        raise drain(e, [tags_task])
    tags = tags_task.value()
    ctx.check()
    log.debug('applying tags to organization %s' % organization.id)
    return apply_tags(organization, tags)


def client_config(config):
    """botocore client Config from the timeout and retry settings in config"""
    params = {}
    for key in ('connect_timeout', 'read_timeout'):
        if config.get(key) is not None:
            params[key] = config[key]
    if config.get('max_attempts') is not None:
        params['retries'] = dict(total_max_attempts=config['max_attempts'])
    return Config(**params)


def get_clients(log, config):
    """
    Return (org_client, tagging_client).  Assume 'org_access_role' in the
    master account if both are configured.
    """
    credentials = dict(region_name=None)
    if config.get('master_account_id') and config.get('org_access_role'):
        credentials = get_assume_role_credentials(log,
                config['master_account_id'], config['org_access_role'])
    boto_config = client_config(config)
    try:
        org_client = boto3.client('organizations', config=boto_config, **credentials)
        tagging_client = boto3.client('resourcegroupstaggingapi', config=boto_config,
                **dict(credentials, region_name=config['tag_region']))
    except BotoCoreError as e:
        raise RemoteCallError('create_client', e) from e
    return org_client, tagging_client


def org_tree_from_config(log, config):
    org_client, tagging_client = get_clients(log, config)
    ctx = Context(
            timeout=config.get('timeout'),
            max_concurrent_calls=config['max_concurrent_calls'])
    return get_org_tree(log, ctx, org_client, tagging_client)
