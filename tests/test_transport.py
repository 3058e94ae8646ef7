"""
Tests for the XML decoder and the transport dispatcher.
"""
from unittest.mock import Mock

import pytest
import requests

from conftest import NS, error_body, make_response, success_body
from services.request_builder import RequestBuilder
from services.shapes import ErrorShape, ListQueuesResponse, ReceiveMessageResponse, SendMessageResponse
from services.transport import Dispatcher
from services.xml_decoder import decode
from utils.exceptions import DecodeError, ServiceError, TransportError


@pytest.fixture
def request_(auth, region):
    return RequestBuilder(auth, region.sqs_endpoint).build('GET', 'ListQueues', '/', {})


@pytest.mark.transport
class TestDecode:
    """Tests for path-bound XML decoding."""

    def test_nested_path_fields(self):
        """Test nested path fields."""
        body = success_body('SendMessage', '<MessageId>abc-123</MessageId>'
                                           '<MD5OfMessageBody>5d41</MD5OfMessageBody>', 'req-9')
        response = decode(body.encode(), SendMessageResponse)

        assert response.message_id == 'abc-123'
        assert response.md5_of_message_body == '5d41'
        assert response.request_id == 'req-9'

    def test_repeated_fields(self):
        """Test repeated fields."""
        body = success_body('ListQueues', '<QueueUrl>https://host/123/alpha</QueueUrl>'
                                          '<QueueUrl>https://host/123/beta</QueueUrl>')
        response = decode(body.encode(), ListQueuesResponse)
        assert response.queue_urls == ['https://host/123/alpha', 'https://host/123/beta']

    def test_nested_shapes(self):
        """Test nested shapes."""
        body = success_body(
            'ReceiveMessage',
            '<Message><MessageId>m1</MessageId><ReceiptHandle>rh1</ReceiptHandle>'
            '<MD5OfBody>x</MD5OfBody><Body>hi</Body>'
            '<Attribute><Name>SenderId</Name><Value>42</Value></Attribute></Message>'
        )
        response = decode(body.encode(), ReceiveMessageResponse)

        assert len(response.messages) == 1
        message = response.messages[0]
        assert (message.message_id, message.receipt_handle, message.body) == ('m1', 'rh1', 'hi')
        assert message.attributes[0].name == 'SenderId'
        assert message.attributes[0].value == '42'

    def test_missing_fields_default_empty(self):
        """Test missing fields default empty."""
        response = decode(success_body('ListQueues').encode(), ListQueuesResponse)
        assert response.queue_urls == []
        assert response.request_id == 'req-0'

    def test_without_namespace(self):
        """Test without namespace."""
        body = b'<SendMessageResponse><SendMessageResult><MessageId>x</MessageId></SendMessageResult></SendMessageResponse>'
        assert decode(body, SendMessageResponse).message_id == 'x'

    def test_malformed_xml(self):
        """Test malformed xml."""
        body = b'<SendMessageResponse><oops'
        with pytest.raises(DecodeError) as excinfo:
            decode(body, SendMessageResponse)
        assert excinfo.value.body == body
        assert '<SendMessageResponse><oops' in str(excinfo.value)

    def test_empty_body(self):
        """Test empty body."""
        with pytest.raises(DecodeError):
            decode(b'', SendMessageResponse)

    def test_wrong_root(self):
        """Test decode rejects a body whose root tag does not match the shape."""
        with pytest.raises(DecodeError, match='Expected <SendMessageResponse>'):
            decode(success_body('ListQueues').encode(), SendMessageResponse)

    def test_error_shape(self):
        """Test ErrorShape binds type, code, message and request id."""
        shape = decode(error_body().encode(), ErrorShape)
        assert (shape.error_type, shape.code, shape.message) == ('Sender', 'AccessDenied', 'no')
        assert shape.effective_request_id == 'req-1'

    def test_not_a_dataclass(self):
        """Test decode raises TypeError for non-dataclass shapes."""
        with pytest.raises(TypeError):
            decode(b'<a/>', dict)


@pytest.mark.transport
class TestDispatcher:
    """Tests for Dispatcher.execute()."""

    def test_success(self, session, request_):
        """Test Dispatcher decodes a 200 body into the requested shape."""
        body = success_body('ListQueues', '<QueueUrl>https://host/123/alpha</QueueUrl>')
        session.send.return_value = make_response(body)

        response = Dispatcher(session, timeout=5).execute(request_, ListQueuesResponse)

        assert response.queue_urls == ['https://host/123/alpha']
        session.send.assert_called_once_with(request_, timeout=5, stream=True)

    def test_body_released_after_success(self, session, request_):
        """Test body released after success."""
        http_response = make_response(success_body('ListQueues'))
        http_response.close = Mock(wraps=http_response.close)
        session.send.return_value = http_response

        Dispatcher(session).execute(request_, ListQueuesResponse)

        http_response.close.assert_called_once()

    def test_body_released_on_decode_failure(self, session, request_):
        """Test body released on decode failure."""
        http_response = make_response(b'not xml at all')
        http_response.close = Mock(wraps=http_response.close)
        session.send.return_value = http_response

        with pytest.raises(DecodeError) as excinfo:
            Dispatcher(session).execute(request_, ListQueuesResponse)

        assert excinfo.value.body == b'not xml at all'
        http_response.close.assert_called_once()

    def test_service_error(self, session, request_):
        """Test Dispatcher raises ServiceError with status and error fields."""
        session.send.return_value = make_response(error_body(), 403, 'Forbidden')

        with pytest.raises(ServiceError) as excinfo:
            Dispatcher(session).execute(request_, ListQueuesResponse)

        error = excinfo.value
        assert error.status_code == 403
        assert error.status_text == 'Forbidden'
        assert error.error_type == 'Sender'
        assert error.code == 'AccessDenied'
        assert error.message == 'no'
        assert error.request_id == 'req-1'
        assert "sqs_code='AccessDenied'" in str(error)

    def test_service_error_bare_error_element(self, session, request_):
        """Test service error bare error element."""
        body = ('<Error><Type>Sender</Type><Code>AccessDenied</Code><Message>no</Message>'
                '<RequestId>req-1</RequestId></Error>')
        session.send.return_value = make_response(body, 403, 'Forbidden')

        with pytest.raises(ServiceError) as excinfo:
            Dispatcher(session).execute(request_, ListQueuesResponse)

        assert excinfo.value.code == 'AccessDenied'
        assert excinfo.value.request_id == 'req-1'

    def test_service_error_request_id_under_metadata(self, session, request_):
        """Test service error request id under metadata."""
        body = (f'<ErrorResponse {NS}><Error><Type>Receiver</Type><Code>InternalError</Code>'
                '<Message>oops</Message></Error>'
                '<ResponseMetadata><RequestId>req-7</RequestId></ResponseMetadata></ErrorResponse>')
        session.send.return_value = make_response(body, 500, 'Internal Server Error')

        with pytest.raises(ServiceError) as excinfo:
            Dispatcher(session).execute(request_, ListQueuesResponse)

        assert excinfo.value.request_id == 'req-7'
        assert excinfo.value.error_type == 'Receiver'

    def test_undecodable_error_body(self, session, request_):
        """Test malformed error body raises DecodeError carrying the body."""
        http_response = make_response(b'<html>Bad Gateway', 502, 'Bad Gateway')
        http_response.close = Mock(wraps=http_response.close)
        session.send.return_value = http_response

        with pytest.raises(DecodeError) as excinfo:
            Dispatcher(session).execute(request_, ListQueuesResponse)

        assert not isinstance(excinfo.value, ServiceError)
        assert excinfo.value.status_code == 502
        assert excinfo.value.body == b'<html>Bad Gateway'
        http_response.close.assert_called_once()

    @pytest.mark.parametrize('body', [
        b'<html><body>Bad Gateway</body></html>',
        b'<ErrorResponse><RequestId>req-3</RequestId></ErrorResponse>',
    ])
    def test_error_body_without_error_element(self, session, request_, body):
        """Test a well-formed error body lacking <Error> is a DecodeError, not an empty ServiceError."""
        session.send.return_value = make_response(body, 502, 'Bad Gateway')

        with pytest.raises(DecodeError) as excinfo:
            Dispatcher(session).execute(request_, ListQueuesResponse)

        assert not isinstance(excinfo.value, ServiceError)
        assert excinfo.value.status_code == 502
        assert excinfo.value.body == body

    @pytest.mark.parametrize('failure', [
        requests.ConnectionError('connection refused'),
        requests.Timeout('timed out'),
    ])
    def test_transport_failure(self, session, request_, failure):
        """Test network failures are wrapped in TransportError."""
        session.send.side_effect = failure

        with pytest.raises(TransportError) as excinfo:
            Dispatcher(session).execute(request_, ListQueuesResponse)

        assert excinfo.value.original is failure
        assert excinfo.value.__cause__ is failure

    def test_exactly_one_round_trip(self, session, request_):
        """Test failed calls are not retried."""
        session.send.return_value = make_response(error_body(code='ServiceUnavailable'), 503, 'Service Unavailable')

        with pytest.raises(ServiceError):
            Dispatcher(session).execute(request_, ListQueuesResponse)

        assert session.send.call_count == 1

    def test_default_session(self):
        """Test Dispatcher creates its own session when none is given."""
        dispatcher = Dispatcher()
        assert isinstance(dispatcher.session, requests.Session)
        assert dispatcher.timeout is None
