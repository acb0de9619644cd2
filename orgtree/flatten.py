"""
Flat views of an assembled Organization.  No remote calls are made.
"""

from orgtree.models import OrgUnitInfo, AccountInfo


def org_units_info(organization):
    """
    Return list of OrgUnitInfo, one per OU in the tree (roots included),
    depth first, siblings sorted by name.
    """
    def walk_ou(org_units, parent_path, parent_id_path, units):
        # recursive sub function to build the 'units' list
        for name in sorted(org_units):
            ou = org_units[name]
            units.append(OrgUnitInfo(
                    name=ou.name,
                    id=ou.id,
                    parent_path=list(parent_path),
                    parent_id_path=list(parent_id_path),
                    tags=dict(ou.tags)))
            walk_ou(ou.org_units, parent_path + [ou.name], parent_id_path + [ou.id], units)

    units = []
    walk_ou(organization.org_units, [], [], units)
    return units


def accounts_info(organization):
    """
    Return dict of {account_name: AccountInfo} for every account in the
    tree.  Accounts sharing a name collide: the one met last in a depth
    first, name sorted walk is kept.
    """
    def walk_accounts(org_units, parent_path, parent_id_path, accounts):
        # recursive sub function to build the 'accounts' table
        for name in sorted(org_units):
            ou = org_units[name]
            ou_name_path = parent_path + [ou.name]
            ou_id_path = parent_id_path + [ou.id]
            for account_name in sorted(ou.accounts):
                account = ou.accounts[account_name]
                accounts[account.name] = AccountInfo(
                        id=account.id,
                        name=account.name,
                        email=account.email,
                        status=account.status,
                        active=account.active,
                        ou_name_path=list(ou_name_path),
                        ou_id_path=list(ou_id_path),
                        org=organization.id,
                        tags=dict(account.tags))
            walk_accounts(ou.org_units, ou_name_path, ou_id_path, accounts)

    accounts = {}
    walk_accounts(organization.org_units, [], [], accounts)
    return accounts
