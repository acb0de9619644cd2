"""Discover the OU/account structure of an AWS Organization"""

__version__ = '0.1.0'
