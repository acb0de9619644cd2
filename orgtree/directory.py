"""
Read operations against the AWS Organizations and Resource Groups Tagging
APIs.  These are the only places boto3 clients are called.
"""

from orgtree.utils import paginate


ACCOUNT_RESOURCE_TYPE = 'organizations:account'


def list_roots(log, ctx, org_client):
    """
    Return list of root dictionaries ({'Id': ..., 'Name': ...}) in the Organization.
    """
    roots = paginate(log, ctx, org_client.list_roots, 'Roots')
    log.debug('roots: %s' % [r['Id'] for r in roots])
    return roots


def list_child_ou_ids(log, ctx, org_client, parent_id):
    """
    Return the Ids of all OrganizationalUnits directly under 'parent_id'.
    """
    children = paginate(log, ctx, org_client.list_children, 'Children',
            f_args=dict(ParentId=parent_id, ChildType='ORGANIZATIONAL_UNIT'))
    log.debug('parent_id: %s; child_ou: %s' % (parent_id, [c['Id'] for c in children]))
    return [c['Id'] for c in children]


def describe_ou(log, ctx, org_client, ou_id):
    return ctx.call(org_client.describe_organizational_unit,
            OrganizationalUnitId=ou_id)['OrganizationalUnit']


def list_accounts_for_parent(log, ctx, org_client, parent_id):
    """
    Return list of account dictionaries directly under 'parent_id'.
    """
    accounts = paginate(log, ctx, org_client.list_accounts_for_parent, 'Accounts',
            f_args=dict(ParentId=parent_id))
    log.debug('parent_id: %s; accounts: %s' % (parent_id, [a.get('Name') for a in accounts]))
    return accounts


def describe_organization(log, ctx, org_client):
    """
    Query AWS Organization for its Id and MasterAccountId.
    """
    org = ctx.call(org_client.describe_organization)['Organization']
    log.debug('organization: %s; master_account_id: %s' %
            (org['Id'], org.get('MasterAccountId')))
    return org


def get_account_tag_mappings(log, ctx, tagging_client):
    """
    Return the ResourceTagMappingList entries of all accounts in the
    Organization.  The tagging API pages with 'PaginationToken'.
    """
    return paginate(log, ctx, tagging_client.get_resources, 'ResourceTagMappingList',
            f_args=dict(
                ResourceTypeFilters=[ACCOUNT_RESOURCE_TYPE],
                IncludeComplianceDetails=False),
            token_key='PaginationToken')
