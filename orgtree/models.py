"""
Data model of an assembled organization tree.

All mappings are keyed by name, not by Id.  Two siblings sharing a name
collide and the one inserted last is kept.
"""

from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional


@dataclass(frozen=True)
class Account:
    id: str
    name: str
    email: str
    status: str
    tags: Dict[str, str] = field(default_factory=dict)

    @property
    def active(self):
        return self.status == 'ACTIVE'

    @classmethod
    def from_response(cls, account):
        """Build from an item of list_accounts_for_parent()['Accounts']"""
        return cls(
            id=account['Id'],
            name=account.get('Name', ''),
            email=account.get('Email', ''),
            status=account.get('Status', ''),
        )


@dataclass(frozen=True)
class OrganizationalUnit:
    name: str
    id: str
    tags: Dict[str, str] = field(default_factory=dict)
    org_units: Dict[str, 'OrganizationalUnit'] = field(default_factory=dict)
    accounts: Dict[str, Account] = field(default_factory=dict)


@dataclass(frozen=True)
class Organization:
    id: str
    management_account: Optional[Account] = None
    org_units: Dict[str, OrganizationalUnit] = field(default_factory=dict)

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class OrgUnitInfo:
    """An OU with the names and Ids of its ancestors, root first."""
    name: str
    id: str
    parent_path: List[str]
    parent_id_path: List[str]
    tags: Dict[str, str]


@dataclass(frozen=True)
class AccountInfo:
    """
    An account with the path of OUs from the root down to, and including,
    the OU it sits in.
    """
    id: str
    name: str
    email: str
    status: str
    active: bool
    ou_name_path: List[str]
    ou_id_path: List[str]
    org: str
    tags: Dict[str, str]
