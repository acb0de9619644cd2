#!/usr/bin/env python


"""Report the structure of an AWS Organization.

Usage:
  orgtree (tree|ous|accounts) [--config FILE]
                              [--master-account-id ID]
                              [--org-access-role ROLE]
                              [--timeout SECONDS]
                              [--json] [-q] [-d|-dd]
  orgtree (--help|--version)

Modes of operation:
  tree           Display the nested organization tree.
  ous            Display a flat list of organizational units with their paths.
  accounts       Display a flat map of accounts by name with their OU paths.

Options:
  -h, --help                Show this help message and exit.
  -V, --version             Display version info and exit.
  --config FILE             Config file in yaml format.
  --master-account-id ID    AWS account Id of the Org master account.
  --org-access-role ROLE    IAM role to assume in the master account.
  --timeout SECONDS         Give up if the org tree is not built in time.
  --json                    Print json instead of yaml.
  -q, --quiet               Repress log output.
  -d, --debug               Increase log level to 'DEBUG'.
  -dd                       Include botocore and boto3 logs in log stream.

"""


import sys
import json
from dataclasses import asdict

from docopt import docopt

import orgtree
from orgtree.context import OrgTreeError
from orgtree.flatten import org_units_info, accounts_info
from orgtree.config import load_config
from orgtree.tree import org_tree_from_config
from orgtree.utils import get_logger, yamlfmt


def report_data(args, organization):
    """Select the view of 'organization' requested on the command line."""
    if args['ous']:
        return [asdict(unit) for unit in org_units_info(organization)]
    if args['accounts']:
        return {name: asdict(account)
                for name, account in accounts_info(organization).items()}
    return organization.to_dict()


def format_report(data, as_json=False):
    if as_json:
        return json.dumps(data, indent=2, sort_keys=True)
    return yamlfmt(data)


def main():
    args = docopt(__doc__, version=orgtree.__version__)
    log = get_logger(args)
    log.debug(args)
    config = load_config(log, args)
    try:
        organization = org_tree_from_config(log, config)
    except OrgTreeError as e:
        log.critical("can not build org tree: %s" % e)
        sys.exit(1)
    print(format_report(report_data(args, organization), args['--json']))


if __name__ == "__main__":
    main()
