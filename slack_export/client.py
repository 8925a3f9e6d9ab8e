import ssl
from slack_sdk import WebClient
from utils import setup_logger

logger = setup_logger("SlackClient")

class SlackClient:
    def __init__(self, token: str):
        self.token = token

        if not self.token:
            logger.error("Slack token not provided")
            raise ValueError("Slack token is missing")

        # No retry handlers: rate limits are retried by RetryPolicy and
        # connection errors must reach the caller on the first failure.
        self.client = WebClient(
            token=self.token,
            ssl=ssl.create_default_context(),
            retry_handlers=[]
        )
        logger.debug("Slack client initialized")

    def get_client(self) -> WebClient:
        return self.client
