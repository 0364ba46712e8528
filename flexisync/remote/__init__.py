# FlexiSync Remote Module
# Connection contract and REST implementation for the record platform

from flexisync.remote.connection import Connection
from flexisync.remote.salesforce import SalesforceConnection

__all__ = [
    "Connection",
    "SalesforceConnection",
]
