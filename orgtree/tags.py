"""
Fetch account tags in bulk and splice them onto an assembled org tree.
"""

from dataclasses import replace

from orgtree.directory import get_account_tag_mappings


def account_id_from_arn(arn):
    """
    arn:aws:organizations::111111111111:account/o-exampleorgid/222222222222
    -> '222222222222'
    """
    return arn.split('/')[-1]


def fetch_account_tags(log, ctx, tagging_client):
    """
    Query the tagging API for the tags of every account in the Organization.
    Returns dict of {account_id: {tag_key: tag_value}}.
    """
    account_tags = {}
    for resource in get_account_tag_mappings(log, ctx, tagging_client):
        account_id = account_id_from_arn(resource['ResourceARN'])
        if account_id in account_tags:
            log.debug('account %s returned more than once by get_resources' % account_id)
        account_tags[account_id] = {
                tag['Key']: tag.get('Value', '') for tag in resource.get('Tags', [])}
    log.debug('found tags for %s accounts' % len(account_tags))
    return account_tags


def _tag_account(account, tags_by_account_id):
    if account.id in tags_by_account_id:
        return replace(account, tags=dict(tags_by_account_id[account.id]))
    return account


def _tag_org_units(org_units, tags_by_account_id):
    # recursive sub function. builds new OU maps, leaves the old ones alone
    tagged = {}
    for name, ou in org_units.items():
        tagged[name] = replace(ou,
                accounts={k: _tag_account(a, tags_by_account_id)
                        for k, a in ou.accounts.items()},
                org_units=_tag_org_units(ou.org_units, tags_by_account_id))
    return tagged


def apply_tags(organization, tags_by_account_id):
    """
    Return a copy of 'organization' where every account found in
    'tags_by_account_id' carries those tags.  Accounts not found keep
    their current tags.
    """
    management_account = organization.management_account
    if management_account is not None:
        management_account = _tag_account(management_account, tags_by_account_id)
    return replace(organization,
            management_account=management_account,
            org_units=_tag_org_units(organization.org_units, tags_by_account_id))
