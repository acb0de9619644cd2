"""
Shared fixtures and in-memory stand-ins for the boto3 organizations and
resourcegroupstaggingapi clients.
"""
import logging
import os
import sys
import threading

import pytest
from botocore.exceptions import ClientError

# Add repo root to import path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from orgtree.context import Context


def client_error(operation, code="AccessDeniedException"):
    return ClientError({"Error": {"Code": code, "Message": "%s denied" % operation}}, operation)


def account(account_id, name, status="ACTIVE"):
    return {
        "Id": account_id,
        "Arn": "arn:aws:organizations::111111111111:account/o-1/%s" % account_id,
        "Name": name,
        "Email": "%s@example.com" % name,
        "Status": status,
    }


def ou(ou_id, name, accounts=(), children=()):
    return {"Id": ou_id, "Name": name, "Accounts": list(accounts), "OU": list(children)}


class FakeOrganizations:
    """
    Serves an OU tree given as nested ou() dicts.  Every paginated call
    returns 'page_size' items per page.  'failures' maps
    (operation, id) to the exception raised for that call.
    """

    def __init__(self, org_id, master_account_id, roots, page_size=1, failures=None):
        self.org_id = org_id
        self.master_account_id = master_account_id
        self.roots = roots
        self.page_size = page_size
        self.failures = failures or {}
        self.calls = []
        self._lock = threading.Lock()
        self.children = {}
        self.accounts = {}
        self.ous = {}
        for root in roots:
            self._index(root)

    def _index(self, node):
        self.children[node["Id"]] = [c["Id"] for c in node["OU"]]
        self.accounts[node["Id"]] = node["Accounts"]
        for child in node["OU"]:
            self.ous[child["Id"]] = {"Id": child["Id"], "Name": child["Name"]}
            self._index(child)

    def _record(self, operation, key):
        with self._lock:
            self.calls.append((operation, key))
        if (operation, key) in self.failures:
            raise self.failures[(operation, key)]

    def _page(self, key, items, next_token):
        start = int(next_token) if next_token else 0
        end = start + self.page_size
        response = {key: list(items[start:end])}
        if end < len(items):
            response["NextToken"] = str(end)
        return response

    def calls_to(self, operation):
        return [key for op, key in self.calls if op == operation]

    def describe_organization(self):
        self._record("describe_organization", None)
        return {"Organization": {
            "Id": self.org_id,
            "Arn": "arn:aws:organizations::%s:organization/%s" % (self.master_account_id, self.org_id),
            "MasterAccountId": self.master_account_id,
        }}

    def list_roots(self, NextToken=None):  # noqa: N803 - boto3 shape
        self._record("list_roots", NextToken)
        roots = [{"Id": r["Id"], "Name": r["Name"], "PolicyTypes": []} for r in self.roots]
        return self._page("Roots", roots, NextToken)

    def list_children(self, ParentId, ChildType, NextToken=None):  # noqa: N803
        assert ChildType == "ORGANIZATIONAL_UNIT"
        self._record("list_children", ParentId)
        children = [{"Id": c, "Type": ChildType} for c in self.children[ParentId]]
        return self._page("Children", children, NextToken)

    def describe_organizational_unit(self, OrganizationalUnitId):  # noqa: N803
        self._record("describe_organizational_unit", OrganizationalUnitId)
        return {"OrganizationalUnit": dict(self.ous[OrganizationalUnitId])}

    def list_accounts_for_parent(self, ParentId, NextToken=None):  # noqa: N803
        self._record("list_accounts_for_parent", ParentId)
        return self._page("Accounts", self.accounts[ParentId], NextToken)


class FakeTagging:
    """Serves get_resources from a dict of {account_id: {key: value}}."""

    def __init__(self, tags, page_size=1, error=None):
        self.mappings = [
            {
                "ResourceARN": "arn:aws:organizations::111111111111:account/o-1/%s" % account_id,
                "Tags": [{"Key": k, "Value": v} for k, v in account_tags.items()],
            }
            for account_id, account_tags in tags.items()
        ]
        self.page_size = page_size
        self.error = error
        self.calls = []

    def get_resources(self, ResourceTypeFilters, IncludeComplianceDetails, PaginationToken=None):  # noqa: N803
        self.calls.append((ResourceTypeFilters, PaginationToken))
        if self.error is not None:
            raise self.error
        start = int(PaginationToken) if PaginationToken else 0
        end = start + self.page_size
        more = end < len(self.mappings)
        return {
            "ResourceTagMappingList": self.mappings[start:end],
            "PaginationToken": str(end) if more else "",
        }


@pytest.fixture
def log():
    return logging.getLogger("orgtree.tests")


@pytest.fixture
def ctx():
    return Context()


@pytest.fixture
def simple_roots():
    """One root 'Root' holding OU 'Infra' which holds the management account."""
    return [
        ou("r-root", "Root", children=[
            ou("ou-infra", "Infra", accounts=[account("111111111111", "mgmt")]),
        ]),
    ]


@pytest.fixture
def deep_roots():
    """
    Root
      shared-services (222222222222)
      Workloads
        Prod
          Payments
            payments-prod (333333333333), payments-dr (444444444444, SUSPENDED)
        Dev
          dev-sandbox (555555555555)
      Security
        audit (666666666666)
    """
    return [
        ou("r-root", "Root", accounts=[account("222222222222", "shared-services")], children=[
            ou("ou-workloads", "Workloads", children=[
                ou("ou-prod", "Prod", children=[
                    ou("ou-payments", "Payments", accounts=[
                        account("333333333333", "payments-prod"),
                        account("444444444444", "payments-dr", status="SUSPENDED"),
                    ]),
                ]),
                ou("ou-dev", "Dev", accounts=[account("555555555555", "dev-sandbox")]),
            ]),
            ou("ou-security", "Security", accounts=[account("666666666666", "audit")]),
        ]),
    ]
