import os
import sys

import yaml

from orgtree.context import DEFAULT_MAX_CONCURRENT_CALLS
from orgtree.utils import yamlfmt
from orgtree.validator import config_validator

# Config parser defaults
DEFAULT_CONFIG_FILE = '~/.orgtree/config.yaml'
DEFAULT_CONFIG = dict(
    master_account_id=None,
    org_access_role=None,
    tag_region='us-east-1',
    timeout=None,
    max_concurrent_calls=DEFAULT_MAX_CONCURRENT_CALLS,
    connect_timeout=None,
    read_timeout=None,
    max_attempts=None,
)

# cli option -> (config key, type)
CLI_OPTIONS = {
    '--master-account-id': ('master_account_id', str),
    '--org-access-role': ('org_access_role', str),
    '--timeout': ('timeout', float),
}


def scan_config_file(log, args):
    """
    Load the yaml config file.  Return a dict, empty when there is no
    config file.  Return None if the file exists but can not be loaded.
    """
    if args.get('--config'):
        config_file = args['--config']
    else:
        config_file = DEFAULT_CONFIG_FILE
    config_file = os.path.expanduser(config_file)
    if not os.path.isfile(config_file):
        if args.get('--config'):
            log.error("config_file not found: {}".format(config_file))
            return None
        log.debug("no config file at {}. using defaults".format(config_file))
        return {}
    log.debug("loading config file: {}".format(config_file))
    with open(config_file) as f:
        try:
            config = yaml.safe_load(f.read())
        except (yaml.YAMLError, UnicodeDecodeError):
            log.error("{} not a valid yaml file".format(config_file))
            return None
    if config is None:
        return {}
    if not isinstance(config, dict):
        log.error("{} must contain a yaml mapping".format(config_file))
        return None
    log.debug("config: {}".format(config))
    return config


def cli_config(log, args):
    """Return dict of config keys set as cli options."""
    config = {}
    for option, (key, convert) in CLI_OPTIONS.items():
        if args.get(option) is not None:
            try:
                config[key] = convert(args[option])
            except ValueError:
                log.critical("invalid value for {}: {}".format(option, args[option]))
                sys.exit(1)
    return config


def load_config(log, args):
    """
    Assemble config options from cli options, config file params and
    defaults, in that order of precedence.  Exit if the result does
    not validate.
    """
    file_config = scan_config_file(log, args)
    if file_config is None:
        log.critical("can not load config file")
        sys.exit(1)
    config = dict(DEFAULT_CONFIG)
    config.update({k: v for k, v in file_config.items() if v is not None})
    config.update(cli_config(log, args))
    validator = config_validator(log)
    if not validator.validate(config):
        log.critical("config validation failed:\n{}".format(yamlfmt(validator.errors)))
        sys.exit(1)
    log.debug("config:\n{}".format(yamlfmt(config)))
    return config
