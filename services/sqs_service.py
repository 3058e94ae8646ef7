"""
SQS service and queue handles.

An SQS handle owns the credentials, the region endpoint and the HTTP
session; Queue handles keep a reference to it plus the queue's URL path,
which is the queue's only identity. Every method performs a single round
trip and never caches remote state.
"""
import posixpath
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, Iterable, List, Mapping, Optional, Sequence, Type, TypeVar, Union
from urllib.parse import urlparse

import requests

from logger_config import get_logger
from utils.decorators import sqs_operation
from utils.exceptions import QueueNotFoundError
from .context import Auth, Region
from .request_builder import RequestBuilder
from .shapes import (
    CreateQueueResponse,
    GetQueueAttributesResponse,
    ListQueuesResponse,
    ReceiveMessageResponse,
    ResponseMetadata,
    SendMessageResponse,
)
from .transport import Dispatcher

if TYPE_CHECKING:
    from config import Config

logger = get_logger(__name__)

T = TypeVar('T')

MAX_RECEIVE_MESSAGES = 10


class Attribute(str, Enum):
    """Queue attribute names accepted by GetQueueAttributes and SetQueueAttributes."""

    ALL = 'All'
    APPROXIMATE_NUMBER_OF_MESSAGES = 'ApproximateNumberOfMessages'
    APPROXIMATE_NUMBER_OF_MESSAGES_NOT_VISIBLE = 'ApproximateNumberOfMessagesNotVisible'
    VISIBILITY_TIMEOUT = 'VisibilityTimeout'
    CREATED_TIMESTAMP = 'CreatedTimestamp'
    LAST_MODIFIED_TIMESTAMP = 'LastModifiedTimestamp'
    POLICY = 'Policy'
    MAXIMUM_MESSAGE_SIZE = 'MaximumMessageSize'
    MESSAGE_RETENTION_PERIOD = 'MessageRetentionPeriod'
    QUEUE_ARN = 'QueueArn'


@dataclass(frozen=True)
class Message:
    """A received message. The receipt handle is only valid for the current visibility window."""

    id: str
    body: str
    receipt_handle: str
    md5_of_body: str = ''
    attributes: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class QueueAttribute:
    name: str
    value: str


@dataclass(frozen=True)
class QueueAttributes:
    attributes: List[QueueAttribute]
    request_id: str = ''

    def as_dict(self) -> Dict[str, str]:
        return {attribute.name: attribute.value for attribute in self.attributes}


def _attribute_name(attribute: Union[Attribute, str]) -> str:
    return attribute.value if isinstance(attribute, Attribute) else str(attribute)


def _non_negative(name: str, value: int) -> str:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{name} must be a non-negative integer, got {value!r}")
    return str(value)


def _numbered(prefix: str, values: Iterable[str]) -> Dict[str, str]:
    """Expand values into 1-based indexed parameters (Prefix.1, Prefix.2, ...)."""
    return {f'{prefix}.{index}': value for index, value in enumerate(values, start=1)}


class SQS:
    """Handle for the SQS service in one region."""

    def __init__(
        self,
        auth: Auth,
        region: Region,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None
    ) -> None:
        """
        Initialize SQS handle.

        Args:
            auth: Credentials used to sign every request
            region: Region whose endpoint receives the requests
            session: HTTP session (transport); a new one if omitted
            timeout: Per-request timeout in seconds
        """
        self._auth = auth
        self._region = region
        self._builder = RequestBuilder(auth, region.sqs_endpoint)
        self._dispatcher = Dispatcher(session, timeout)

    @classmethod
    def from_config(cls, config: 'Config', session: Optional[requests.Session] = None) -> 'SQS':
        """Create a handle from process configuration."""
        return cls(config.auth(), config.region(), session=session, timeout=config.timeout)

    @property
    def auth(self) -> Auth:
        return self._auth

    @property
    def region(self) -> Region:
        return self._region

    @property
    def session(self) -> requests.Session:
        return self._dispatcher.session

    def call(
        self,
        method: str,
        action: str,
        path: str,
        params: Optional[Mapping[str, str]],
        shape: Type[T]
    ) -> T:
        """Build, sign and dispatch one action, returning its decoded shape."""
        request = self._builder.build(method, action, path, params)
        return self._dispatcher.execute(request, shape)

    def _queue_from_url(self, queue_url: str) -> 'Queue':
        return Queue(self, urlparse(queue_url).path)

    @sqs_operation('ListQueues')
    def list_queues(self, name_prefix: str = '') -> List['Queue']:
        """
        List queues, optionally only those whose names start with a prefix.

        Only the first response page is returned.
        """
        params = {}
        if name_prefix:
            params['QueueNamePrefix'] = name_prefix
        response = self.call('GET', 'ListQueues', '/', params, ListQueuesResponse)
        return [self._queue_from_url(queue_url) for queue_url in response.queue_urls]

    def queue(self, name: str) -> 'Queue':
        """
        Resolve a queue by exact name.

        Raises:
            QueueNotFoundError: If no listed queue has exactly this name
        """
        if not name:
            raise ValueError("Queue name is required")
        for queue in self.list_queues(name):
            if queue.name == name:
                return queue
        logger.info(f"No queue named {name!r} in {self.region.name}")
        raise QueueNotFoundError(name)

    @sqs_operation('CreateQueue')
    def create_queue(self, name: str, default_visibility_timeout: Optional[int] = None) -> 'Queue':
        """
        Create a queue, or return the existing one with the same name and settings.

        Args:
            name: Queue name
            default_visibility_timeout: Visibility timeout in seconds for
                messages received from the queue
        """
        if not name:
            raise ValueError("Queue name is required")
        params = {'QueueName': name}
        if default_visibility_timeout is not None:
            params['DefaultVisibilityTimeout'] = _non_negative(
                'default_visibility_timeout', default_visibility_timeout
            )
        response = self.call('GET', 'CreateQueue', '/', params, CreateQueueResponse)
        return self._queue_from_url(response.queue_url)


class Queue:
    """Handle for one queue, identified by its URL path (e.g. /123456789012/orders)."""

    def __init__(self, sqs: SQS, path: str) -> None:
        self.sqs = sqs
        self.path = path

    @property
    def name(self) -> str:
        return posixpath.basename(self.path.rstrip('/'))

    @property
    def url(self) -> str:
        return self.sqs.region.sqs_endpoint + self.path

    def __repr__(self) -> str:
        return f"Queue(path={self.path!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Queue):
            return NotImplemented
        return self.sqs is other.sqs and self.path == other.path

    def __hash__(self) -> int:
        return hash((id(self.sqs), self.path))

    @sqs_operation('DeleteQueue')
    def delete_queue(self) -> None:
        """Delete the queue and every message in it."""
        self.sqs.call('GET', 'DeleteQueue', self.path, None, ResponseMetadata)

    @sqs_operation('SendMessage')
    def send_message(self, body: str) -> str:
        """
        Deliver a message to the queue.

        Returns:
            The id the service assigned to the message
        """
        response = self.sqs.call(
            'POST', 'SendMessage', self.path, {'MessageBody': body}, SendMessageResponse
        )
        return response.message_id

    @sqs_operation('ReceiveMessage')
    def receive_message(
        self,
        max_number_of_messages: Optional[int] = None,
        visibility_timeout: Optional[int] = None,
        attribute_names: Sequence[str] = ()
    ) -> List[Message]:
        """
        Receive up to max_number_of_messages messages (1-10).

        Args:
            max_number_of_messages: Upper bound on messages returned
            visibility_timeout: Seconds the messages stay hidden from other receivers
            attribute_names: Message attributes to return (e.g. 'SenderId', 'All')

        Returns:
            Received messages; empty when none are available
        """
        params = {}
        if max_number_of_messages is not None:
            if (isinstance(max_number_of_messages, bool)
                    or not isinstance(max_number_of_messages, int)
                    or not 1 <= max_number_of_messages <= MAX_RECEIVE_MESSAGES):
                raise ValueError(
                    f"max_number_of_messages must be between 1 and {MAX_RECEIVE_MESSAGES}"
                )
            params['MaxNumberOfMessages'] = str(max_number_of_messages)
        if visibility_timeout is not None:
            params['VisibilityTimeout'] = _non_negative('visibility_timeout', visibility_timeout)
        params.update(_numbered('AttributeName', (_attribute_name(name) for name in attribute_names)))

        response = self.sqs.call('GET', 'ReceiveMessage', self.path, params, ReceiveMessageResponse)
        return [
            Message(
                id=message.message_id,
                body=message.body,
                receipt_handle=message.receipt_handle,
                md5_of_body=message.md5_of_body,
                attributes={attribute.name: attribute.value for attribute in message.attributes},
            )
            for message in response.messages
        ]

    @staticmethod
    def _receipt_handle(message: Union[Message, str]) -> str:
        receipt_handle = message.receipt_handle if isinstance(message, Message) else message
        if not receipt_handle:
            raise ValueError("A receipt handle is required")
        return receipt_handle

    @sqs_operation('DeleteMessage')
    def delete_message(self, message: Union[Message, str]) -> None:
        """Delete a received message, given the message or its receipt handle."""
        params = {'ReceiptHandle': self._receipt_handle(message)}
        self.sqs.call('GET', 'DeleteMessage', self.path, params, ResponseMetadata)

    @sqs_operation('ChangeMessageVisibility')
    def change_message_visibility(self, message: Union[Message, str], visibility_timeout: int) -> None:
        """Reset how long a received message stays hidden, counted from now."""
        params = {
            'ReceiptHandle': self._receipt_handle(message),
            'VisibilityTimeout': _non_negative('visibility_timeout', visibility_timeout),
        }
        self.sqs.call('GET', 'ChangeMessageVisibility', self.path, params, ResponseMetadata)

    @sqs_operation('GetQueueAttributes')
    def get_queue_attributes(self, *attrs: Union[Attribute, str]) -> QueueAttributes:
        """
        Get one or more queue attributes; all of them when none are named.

        Values come back as strings, exactly as the service reports them.
        """
        names = [_attribute_name(attr) for attr in attrs] or [Attribute.ALL.value]
        params = _numbered('AttributeName', names)
        response = self.sqs.call(
            'GET', 'GetQueueAttributes', self.path, params, GetQueueAttributesResponse
        )
        return QueueAttributes(
            attributes=[QueueAttribute(a.name, a.value) for a in response.attributes],
            request_id=response.request_id,
        )

    @sqs_operation('SetQueueAttributes')
    def set_queue_attributes(self, attribute: Union[Attribute, str], value: str) -> None:
        """Set one queue attribute (e.g. VisibilityTimeout, Policy)."""
        name = _attribute_name(attribute)
        if name == Attribute.ALL.value:
            raise ValueError("'All' cannot be set")
        params = {'Attribute.Name': name, 'Attribute.Value': str(value)}
        self.sqs.call('POST', 'SetQueueAttributes', self.path, params, ResponseMetadata)

    @sqs_operation('AddPermission')
    def add_permission(self, label: str, account_ids: Sequence[str], actions: Sequence[str]) -> None:
        """
        Grant principals permission to perform actions on the queue.

        Args:
            label: Unique identifier for the permission statement
            account_ids: AWS account ids of the principals
            actions: Action names paired with account_ids by position
                (e.g. 'SendMessage', '*')
        """
        if not label:
            raise ValueError("Permission label is required")
        if not account_ids or len(account_ids) != len(actions):
            raise ValueError("account_ids and actions must be non-empty and the same length")
        params = {'Label': label}
        params.update(_numbered('AWSAccountId', account_ids))
        params.update(_numbered('ActionName', actions))
        self.sqs.call('POST', 'AddPermission', self.path, params, ResponseMetadata)

    @sqs_operation('RemovePermission')
    def remove_permission(self, label: str) -> None:
        """Revoke the permission statement added under label."""
        if not label:
            raise ValueError("Permission label is required")
        self.sqs.call('GET', 'RemovePermission', self.path, {'Label': label}, ResponseMetadata)
