"""
Call context shared by every remote call made while building an org tree.

A Context carries an optional deadline, a cancellation flag and a bound on
the number of remote calls in flight.  All remote calls go through
Context.call() so a deadline or a failure in one branch of the walk is seen
by every other branch at its next call site.
"""

import time
import threading

from botocore.exceptions import BotoCoreError, ClientError


DEFAULT_MAX_CONCURRENT_CALLS = 20


class OrgTreeError(RuntimeError):
    """Base class for errors raised while building an org tree."""


class RemoteCallError(OrgTreeError):
    """
    A call to the organizations or tagging API failed.
    """

    def __init__(self, operation, cause):
        self.operation = operation
        self.cause = cause
        super().__init__("%s failed: %s" % (operation, cause))


class DeadlineExceeded(OrgTreeError):
    """The context deadline passed before or during a remote call."""


class Cancelled(OrgTreeError):
    """The context was cancelled because another branch already failed."""


class Context(object):
    """
    args:
        timeout:                (optional) seconds until the deadline
        max_concurrent_calls:   number of remote calls allowed in flight
    """

    def __init__(self, timeout=None, max_concurrent_calls=DEFAULT_MAX_CONCURRENT_CALLS):
        if timeout is not None:
            self.deadline = time.monotonic() + float(timeout)
        else:
            self.deadline = None
        self._cancelled = threading.Event()
        self._calls = threading.BoundedSemaphore(max_concurrent_calls)

    def cancel(self):
        self._cancelled.set()

    @property
    def cancelled(self):
        return self._cancelled.is_set()

    def check(self):
        """
        Raise Cancelled or DeadlineExceeded if no further calls may be made.
        An expired deadline also cancels the context.
        """
        if self._cancelled.is_set():
            raise Cancelled("context cancelled")
        if self.deadline is not None and time.monotonic() >= self.deadline:
            self.cancel()
            raise DeadlineExceeded("context deadline exceeded")

    def call(self, client_function, **f_args):
        """
        Run a single boto3 client call.  botocore errors are wrapped in
        RemoteCallError and cancel the context.  A response that arrives
        after the deadline is discarded.
        """
        operation = getattr(client_function, '__name__', repr(client_function))
        self.check()
        with self._calls:
            self.check()
            try:
                response = client_function(**f_args)
            except (ClientError, BotoCoreError) as e:
                self.cancel()
                raise RemoteCallError(operation, e) from e
            self.check()
            return response
