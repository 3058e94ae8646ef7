"""
Executes prepared requests and decodes their responses.
"""
import xml.etree.ElementTree as ET
from typing import Optional, Type, TypeVar

import requests

from logger_config import get_logger
from utils.exceptions import DecodeError, ServiceError, TransportError
from .shapes import ErrorShape
from .xml_decoder import decode, decode_element, parse

logger = get_logger(__name__)

T = TypeVar('T')


class Dispatcher:
    """Performs exactly one HTTP round trip per request, without retries."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None
    ) -> None:
        """
        Initialize dispatcher.

        Args:
            session: HTTP session used for every call (a new one if omitted)
            timeout: Per-request timeout in seconds; None defers to the session
        """
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    def execute(self, request: requests.PreparedRequest, shape: Type[T]) -> T:
        """
        Send a request and decode the response.

        Args:
            request: Signed prepared request
            shape: Response shape to decode a 200 body into

        Returns:
            Decoded shape instance

        Raises:
            TransportError: On connection, DNS, timeout or body-read failure
            ServiceError: On a non-200 status with a decodable error body
            DecodeError: When either a success or an error body cannot be decoded
        """
        try:
            with self.session.send(request, timeout=self.timeout, stream=True) as response:
                # Read the whole body before the response is released
                body = response.content
                status_code = response.status_code
                status_text = response.reason or ''
        except requests.RequestException as e:
            logger.error(f"Transport failure for {request.method} {request.path_url.split('?')[0]}: {e}")
            raise TransportError(f"Request failed: {e}", original=e) from e

        if status_code != 200:
            raise self.build_error(status_code, status_text, body)
        return decode(body, shape)

    @staticmethod
    def build_error(status_code: int, status_text: str, body: bytes) -> ServiceError:
        """
        Decode a non-200 response body into a ServiceError.

        Raises:
            DecodeError: If the error body itself cannot be decoded
        """
        try:
            root = parse(body)
        except DecodeError as e:
            raise DecodeError(
                f"Could not decode error response (HTTP {status_code})",
                body,
                status_code=status_code,
            ) from e

        if root.tag == 'Error':
            # Bare <Error> element without the ErrorResponse wrapper
            wrapper = ET.Element('ErrorResponse')
            wrapper.append(root)
            request_id = root.find('RequestId')
            if request_id is not None:
                wrapper.append(request_id)
            root = wrapper

        if root.tag != 'ErrorResponse' or root.find('Error') is None:
            raise DecodeError(
                f"Error response (HTTP {status_code}) has no <Error> element",
                body,
                status_code=status_code,
            )
        shape = decode_element(root, ErrorShape, body)
        return ServiceError(
            status_code=status_code,
            status_text=status_text,
            error_type=shape.error_type,
            code=shape.code,
            message=shape.message,
            request_id=shape.effective_request_id,
        )
