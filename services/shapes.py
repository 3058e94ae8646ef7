"""
Response shapes for each SQS action.
"""
from dataclasses import dataclass
from typing import List, Optional

from .xml_decoder import xml_field

REQUEST_ID_PATH = 'ResponseMetadata/RequestId'


@dataclass
class ResponseMetadata:
    """Shape for actions whose only payload is the request id."""

    request_id: str = xml_field(REQUEST_ID_PATH)


@dataclass
class ListQueuesResponse:
    ROOT = 'ListQueuesResponse'

    queue_urls: List[str] = xml_field('ListQueuesResult/QueueUrl', many=True)
    request_id: str = xml_field(REQUEST_ID_PATH)


@dataclass
class CreateQueueResponse:
    ROOT = 'CreateQueueResponse'

    queue_url: str = xml_field('CreateQueueResult/QueueUrl')
    request_id: str = xml_field(REQUEST_ID_PATH)


@dataclass
class SendMessageResponse:
    ROOT = 'SendMessageResponse'

    message_id: str = xml_field('SendMessageResult/MessageId')
    md5_of_message_body: str = xml_field('SendMessageResult/MD5OfMessageBody')
    request_id: str = xml_field(REQUEST_ID_PATH)


@dataclass
class MessageAttributeShape:
    name: str = xml_field('Name')
    value: str = xml_field('Value')


@dataclass
class MessageShape:
    message_id: str = xml_field('MessageId')
    receipt_handle: str = xml_field('ReceiptHandle')
    md5_of_body: str = xml_field('MD5OfBody')
    body: str = xml_field('Body')
    attributes: List[MessageAttributeShape] = xml_field(
        'Attribute', many=True, shape=MessageAttributeShape
    )


@dataclass
class ReceiveMessageResponse:
    ROOT = 'ReceiveMessageResponse'

    messages: List[MessageShape] = xml_field(
        'ReceiveMessageResult/Message', many=True, shape=MessageShape
    )
    request_id: str = xml_field(REQUEST_ID_PATH)


@dataclass
class AttributeShape:
    name: str = xml_field('Name')
    value: str = xml_field('Value')


@dataclass
class GetQueueAttributesResponse:
    ROOT = 'GetQueueAttributesResponse'

    attributes: List[AttributeShape] = xml_field(
        'GetQueueAttributesResult/Attribute', many=True, shape=AttributeShape
    )
    request_id: str = xml_field(REQUEST_ID_PATH)


@dataclass
class ErrorShape:
    """Body of a non-200 response: <ErrorResponse><Error>...</Error><RequestId/>."""

    error_type: str = xml_field('Error/Type')
    code: str = xml_field('Error/Code')
    message: str = xml_field('Error/Message')
    request_id: str = xml_field('RequestId')
    # Some endpoints nest the id under ResponseMetadata instead
    metadata_request_id: Optional[str] = xml_field(REQUEST_ID_PATH)

    @property
    def effective_request_id(self) -> str:
        return self.request_id or self.metadata_request_id or ''
