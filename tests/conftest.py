"""
Shared fixtures: a fake HTTP session that returns canned XML responses.
"""
import io
import os
import sys
from datetime import datetime, timezone
from unittest.mock import Mock

import pytest
import requests

# Add parent directory to path to import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from services.context import Auth, Region  # noqa: E402

FIXED_TIME = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

NS = 'xmlns="http://queue.amazonaws.com/doc/2009-02-01/"'


def make_response(body, status_code=200, reason='OK'):
    """Build a real requests.Response backed by an in-memory body."""
    if isinstance(body, str):
        body = body.encode('utf-8')
    response = requests.Response()
    response.status_code = status_code
    response.reason = reason
    response.raw = io.BytesIO(body)
    return response


def success_body(action, result='', request_id='req-0'):
    """Wrap a result fragment in the standard <ActionResponse> envelope."""
    result_xml = f'<{action}Result>{result}</{action}Result>' if result else ''
    return (
        f'<?xml version="1.0"?><{action}Response {NS}>{result_xml}'
        f'<ResponseMetadata><RequestId>{request_id}</RequestId></ResponseMetadata>'
        f'</{action}Response>'
    )


def error_body(code='AccessDenied', error_type='Sender', message='no', request_id='req-1'):
    return (
        f'<?xml version="1.0"?><ErrorResponse {NS}><Error><Type>{error_type}</Type>'
        f'<Code>{code}</Code><Message>{message}</Message><Detail/></Error>'
        f'<RequestId>{request_id}</RequestId></ErrorResponse>'
    )


@pytest.fixture
def auth():
    return Auth('AKIDEXAMPLE', 'wJalrXUtnFEMI/K7MDENG+bPxRfiCYEXAMPLEKEY')


@pytest.fixture
def region():
    return Region('us-east-1', 'https://sqs.us-east-1.amazonaws.com')


@pytest.fixture
def session():
    """Mock requests.Session; set session.send.return_value per test."""
    return Mock(spec=requests.Session)


def sent_request(session, index=-1):
    """Return the PreparedRequest passed to session.send."""
    return session.send.call_args_list[index][0][0]
