"""Utility functions used by the various orgtree modules"""

import sys
import queue
import logging
import threading
from collections import namedtuple

import boto3
from botocore.exceptions import BotoCoreError, ClientError
import yaml

from orgtree.context import Cancelled, RemoteCallError


# Outcome of a concurrently run task.  Exactly one of value/error is set.
TaskResult = namedtuple('TaskResult', ['item', 'value', 'error'])


def get_logger(args):
    """
    Setup logging.basicConfig from args.
    Return logging.Logger object.
    """
    debug = args.get('--debug') or 0
    # log level
    log_level = logging.INFO
    if debug:
        log_level = logging.DEBUG
    if args.get('--quiet'):
        log_level = logging.CRITICAL
    # log format
    log_format = '%(name)s: %(levelname)-9s%(message)s'
    if debug:
        log_format = '%(name)s: %(levelname)-9s%(threadName)s %(funcName)s():  %(message)s'
    if debug < 2:
        logging.getLogger('botocore').propagate = False
        logging.getLogger('boto3').propagate = False
    logging.basicConfig(stream=sys.stdout, format=log_format, level=log_level)
    log = logging.getLogger(__name__)
    return log


def _run_task(log, q, item, func, f_args):
    # thread target: report exactly one TaskResult on q
    try:
        value = func(*f_args)
    except Exception as e:
        log.debug('%s: task %s failed: %r' % (threading.current_thread().name, item, e))
        q.put(TaskResult(item, None, e))
        return
    q.put(TaskResult(item, value, None))


class Task(object):
    """
    A single function call running in its own thread.  Call result() to
    wait for it and collect its TaskResult.
    """

    def __init__(self, log, func, f_args=()):
        self.name = getattr(func, '__name__', repr(func))
        self._queue = queue.Queue(maxsize=1)
        self._result = None
        thread = threading.Thread(
                target=_run_task,
                args=(log, self._queue, self.name, func, tuple(f_args)))
        thread.daemon = True
        thread.start()

    def result(self):
        if self._result is None:
            self._result = self._queue.get()
        return self._result

    def value(self):
        """wait for the task. Return its value or raise its error"""
        return collect_results([self.result()])[0]


def start_task(log, func, f_args=()):
    """start func(*f_args) in a new thread. Returns a Task"""
    task = Task(log, func, f_args)
    log.debug('started task: %s' % task.name)
    return task


def queue_threads(log, sequence, func, f_args=()):
    """
    Run func(item, *f_args) for every item in sequence, each in its own
    thread.  Wait for all of them and return a list of TaskResult in the
    order the tasks completed.
    """
    q = queue.Queue()
    items = list(sequence)
    for item in items:
        log.debug('queuing item: %s' % (item,))
        t = threading.Thread(
                target=_run_task,
                args=(log, q, item, func, (item,) + tuple(f_args)))
        t.daemon = True
        t.start()
    log.debug('threads started: %s' % len(items))
    return [q.get() for _ in items]


def first_error(results):
    """
    Return the first error found in a list of TaskResult, or None.
    Errors other than Cancelled take precedence, since a Cancelled is only
    ever a consequence of some other failure.
    """
    errors = [r.error for r in results if r.error is not None]
    for e in errors:
        if not isinstance(e, Cancelled):
            return e
    if errors:
        return errors[0]
    return None


def collect_results(results):
    """
    Raise the first error in a list of TaskResult.  Otherwise return
    the list of their values.
    """
    error = first_error(results)
    if error is not None:
        raise error
    return [r.value for r in results]


def drain(error, tasks):
    """
    Wait for outstanding tasks after 'error' was raised in the calling
    thread.  Return the error that should be propagated.
    """
    results = [TaskResult(None, None, error)]
    results += [task.result() for task in tasks]
    return first_error(results)


def paginate(log, ctx, client_function, object_key, f_args=None, token_key='NextToken'):
    """
    Call a paginated boto3 client function until no further page token
    is returned.  Return the concatenated list found under 'object_key'.

    objects = paginate(log, ctx, org_client.list_roots, 'Roots')
    """
    f_args = dict(f_args or {})
    response = ctx.call(client_function, **f_args)
    objects = list(response[object_key])
    while token_key in response and response[token_key]:
        log.debug("%s: %s" % (token_key, response[token_key]))
        f_args[token_key] = response[token_key]
        response = ctx.call(client_function, **f_args)
        objects += response[object_key]
    return objects


def get_assume_role_credentials(log, account_id, role_name, region_name=None):
    """
    Get temporary sts assume_role credentials for account.
    """
    role_arn = "arn:aws:iam::%s:role/%s" % (account_id, role_name)
    role_session_name = account_id + '-' + role_name.split('/')[-1]
    try:
        sts_client = boto3.client('sts')
        if account_id == sts_client.get_caller_identity()['Account']:
            log.debug('already in account %s. not assuming role' % account_id)
            return dict(region_name=region_name)
        log.debug('assuming role %s' % role_arn)
        credentials = sts_client.assume_role(
                RoleArn=role_arn,
                RoleSessionName=role_session_name
                )['Credentials']
    except (ClientError, BotoCoreError) as e:
        raise RemoteCallError('assume_role', e) from e
    return dict(
            aws_access_key_id=credentials['AccessKeyId'],
            aws_secret_access_key=credentials['SecretAccessKey'],
            aws_session_token=credentials['SessionToken'],
            region_name=region_name)


def yamlfmt(obj):
    """Convert a dictionary object into a yaml formated string"""
    return yaml.safe_dump(obj, default_flow_style=False)

