"""
Config file validator schema data
"""
import yaml

from cerberus import Validator


# All keys are optional.  Unset keys fall back to the defaults in orgtree.config.
# Account Ids must be quoted in yaml, otherwise they load as integers.
#
CONFIG_SCHEMA = """
master_account_id:
  required: False
  nullable: True
  type: string
  regex: '^[0-9]{12}$'
org_access_role:
  required: False
  nullable: True
  type: string
tag_region:
  required: False
  type: string
timeout:
  required: False
  nullable: True
  type: number
  min: 0
max_concurrent_calls:
  required: False
  type: integer
  min: 1
connect_timeout:
  required: False
  nullable: True
  type: number
  min: 0
read_timeout:
  required: False
  nullable: True
  type: number
  min: 0
max_attempts:
  required: False
  nullable: True
  type: integer
  min: 1
"""


def config_validator(log):
    vconfig = Validator(yaml.safe_load(CONFIG_SCHEMA))
    log.debug("config_validator_schema: {}".format(vconfig.schema))
    return vconfig
