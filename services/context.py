"""
Credential and endpoint values shared by every call made through an SQS handle.
"""
from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class Auth:
    """AWS access credentials used to sign requests."""

    access_key: str
    secret_key: str
    token: Optional[str] = None

    def __repr__(self) -> str:
        # Never render the secret
        return f"Auth(access_key={self.access_key!r})"


@dataclass(frozen=True)
class Region:
    """A named region and its SQS endpoint (scheme and host, no path)."""

    name: str
    sqs_endpoint: str


REGIONS: Dict[str, Region] = {
    region.name: region for region in (
        Region('us-east-1', 'https://sqs.us-east-1.amazonaws.com'),
        Region('us-west-1', 'https://sqs.us-west-1.amazonaws.com'),
        Region('us-west-2', 'https://sqs.us-west-2.amazonaws.com'),
        Region('eu-west-1', 'https://sqs.eu-west-1.amazonaws.com'),
        Region('ap-southeast-1', 'https://sqs.ap-southeast-1.amazonaws.com'),
        Region('ap-southeast-2', 'https://sqs.ap-southeast-2.amazonaws.com'),
        Region('ap-northeast-1', 'https://sqs.ap-northeast-1.amazonaws.com'),
        Region('sa-east-1', 'https://sqs.sa-east-1.amazonaws.com'),
        Region('us-gov-west-1', 'https://sqs.us-gov-west-1.amazonaws.com'),
    )
}


def get_region(name: str, endpoint: Optional[str] = None) -> Region:
    """
    Resolve a region by name.

    Args:
        name: Region name (e.g., 'us-east-1')
        endpoint: Optional endpoint override (e.g., a local test server)

    Returns:
        The matching Region; unknown names get the standard endpoint pattern

    Raises:
        ValueError: If name is empty
    """
    if not name:
        raise ValueError("Region name is required")
    if endpoint:
        return Region(name, endpoint.rstrip('/'))
    return REGIONS.get(name) or Region(name, f'https://sqs.{name}.amazonaws.com')
