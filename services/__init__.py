"""
SQS query-protocol client.

This package provides request signing, request building, response
decoding and the SQS/Queue handles built on top of them.
"""
from .context import Auth, Region, REGIONS, get_region
from .sqs_service import SQS, Attribute, Message, Queue, QueueAttribute, QueueAttributes

__all__ = [
    'Auth',
    'Region',
    'REGIONS',
    'get_region',
    'SQS',
    'Attribute',
    'Message',
    'Queue',
    'QueueAttribute',
    'QueueAttributes',
]
