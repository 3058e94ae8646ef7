"""
Configuration module for environment variable validation and type-safe config.

Credentials come from AWS_ACCESS_KEY_ID / AWS_SECRET_ACCESS_KEY when set,
otherwise from the boto3 credential chain (shared credentials file,
profiles, instance roles).
"""
import os
from dataclasses import dataclass
from typing import Optional

import boto3

from logger_config import get_logger
from services.context import Auth, Region, get_region

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class Config:
    """Type-safe configuration object with validated environment variables."""

    access_key: str
    secret_key: str
    session_token: Optional[str] = None
    aws_region: str = "us-east-1"
    sqs_endpoint: Optional[str] = None
    timeout: Optional[float] = DEFAULT_TIMEOUT
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Config":
        """
        Create Config instance from environment variables.

        Raises:
            ValueError: If credentials cannot be resolved or a variable is invalid.
        """
        aws_region = os.environ.get("AWS_REGION", "us-east-1")
        sqs_endpoint = os.environ.get("SQS_ENDPOINT") or None
        log_level = os.environ.get("LOG_LEVEL", "INFO").upper()

        valid_log_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if log_level not in valid_log_levels:
            raise ValueError(
                f"LOG_LEVEL must be one of {valid_log_levels}, got: {log_level}"
            )

        raw_timeout = os.environ.get("SQS_TIMEOUT", str(DEFAULT_TIMEOUT))
        try:
            timeout = float(raw_timeout)
        except ValueError:
            raise ValueError(
                f"SQS_TIMEOUT must be a number of seconds, got: {raw_timeout}"
            ) from None
        if timeout <= 0:
            raise ValueError(f"SQS_TIMEOUT must be positive, got: {raw_timeout}")

        access_key = os.environ.get("AWS_ACCESS_KEY_ID")
        secret_key = os.environ.get("AWS_SECRET_ACCESS_KEY")
        session_token = os.environ.get("AWS_SESSION_TOKEN") or None

        if not (access_key and secret_key):
            access_key, secret_key, session_token = resolve_credentials(aws_region)

        return cls(
            access_key=access_key,
            secret_key=secret_key,
            session_token=session_token,
            aws_region=aws_region,
            sqs_endpoint=sqs_endpoint,
            timeout=timeout,
            log_level=log_level,
        )

    def auth(self) -> Auth:
        return Auth(self.access_key, self.secret_key, self.session_token)

    def region(self) -> Region:
        return get_region(self.aws_region, self.sqs_endpoint)

    def __repr__(self) -> str:
        return (
            f"Config(access_key={self.access_key!r}, aws_region={self.aws_region!r}, "
            f"sqs_endpoint={self.sqs_endpoint!r}, timeout={self.timeout!r}, "
            f"log_level={self.log_level!r})"
        )


def resolve_credentials(aws_region: str) -> tuple:
    """
    Resolve credentials through the boto3 credential chain.

    Returns:
        Tuple of (access_key, secret_key, session_token)

    Raises:
        ValueError: If no credentials can be found.
    """
    credentials = boto3.Session(region_name=aws_region).get_credentials()
    if credentials is None:
        error_msg = (
            'AWS credentials not found in environment variables '
            'or the boto3 credential chain'
        )
        logger.error(error_msg)
        raise ValueError(error_msg)

    frozen = credentials.get_frozen_credentials()
    logger.info('Using credentials from the boto3 credential chain')
    return frozen.access_key, frozen.secret_key, frozen.token


_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get the global configuration instance.

    Returns:
        Config: The validated configuration object

    Raises:
        ValueError: If credentials are missing or a variable is invalid.
    """
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config
