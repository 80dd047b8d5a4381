"""LLM client for message classification using Anthropic Claude models.

The client sends one message body per request and expects a JSON object with
``type``, ``confidence``, ``reason`` and ``summary`` back. It never raises on
transport or parse problems: callers always get a ClassificationResult, with
the UNKNOWN sentinel standing in for anything that went wrong.
"""

import json
import os
import time
from typing import Any, Dict, Optional

import anthropic

from msg_classifier.classification.types import ClassificationResult, MessageType
from msg_classifier.config import InboxConfig
from msg_classifier.exceptions import ClassificationError, ConfigurationError
from msg_classifier.utils.logger_config import get_logger, preview

logger = get_logger(__name__)

SYSTEM_PROMPT = """You classify short text messages received on a mobile phone. You answer with a single JSON object and nothing else."""

USER_PROMPT_TEMPLATE = """Classify the following message text into one of these categories: {categories}.

- SPAM: unsolicited scams, phishing, fake prizes, suspicious links
- PERSONAL: messages from friends, family or colleagues
- TRANSACTIONAL: receipts, deliveries, bank alerts, appointment reminders
- MARKETING: promotions, offers and newsletters from known brands
- OTP: one-time passwords and verification codes
- UNKNOWN: none of the above fits

Message: "{text}"

Respond in this JSON format:
{{"type": "<CATEGORY>", "confidence": <number from 0 to 1>, "reason": "<brief explanation for this classification>", "summary": "<very short summary of the message content>"}}"""


class ClassificationClient:
    """Classifies message text with Anthropic Claude."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "claude-3-5-haiku-20241022",
        max_tokens: int = 300,
        temperature: float = 0.0,
        timeout_seconds: float = 30.0,
        max_retries: int = 2,
    ):
        """Initialize the classification client.

        Args:
            api_key: Anthropic API key. If None, reads from ANTHROPIC_API_KEY env var.
            model: Claude model to use for classification.
            max_tokens: Maximum tokens in response.
            temperature: Sampling temperature (0.0 to 1.0).
            timeout_seconds: Upper bound on one request, retries included per attempt.
            max_retries: How many times the SDK retries a failed request.

        Raises:
            ConfigurationError: If API key is not provided or found in environment.
        """
        self.api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        if not self.api_key:
            raise ConfigurationError(
                "Anthropic API key required. Provide via api_key parameter "
                "or ANTHROPIC_API_KEY environment variable."
            )

        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries

        self.client = anthropic.Anthropic(
            api_key=self.api_key,
            timeout=timeout_seconds,
            max_retries=max_retries,
        )

        self.total_requests = 0
        self.failed_requests = 0
        self.total_duration = 0.0

        logger.info(f"Initialized classification client with model: {model}")

    @classmethod
    def from_config(cls, config: InboxConfig, api_key: Optional[str] = None) -> "ClassificationClient":
        """Build a client from application configuration."""
        return cls(
            api_key=api_key,
            model=config.anthropic_model,
            max_tokens=config.max_tokens,
            temperature=config.temperature,
            timeout_seconds=config.classification_timeout_seconds,
            max_retries=config.max_retries,
        )

    def build_prompt(self, text: str) -> str:
        """Fill the user prompt with the message text."""
        categories = ", ".join(t.value for t in MessageType)
        return USER_PROMPT_TEMPLATE.format(categories=categories, text=text)

    def _parse_json_response(self, response_text: str) -> Dict[str, Any]:
        """Extract the JSON object from an LLM response.

        Args:
            response_text: Raw response text from LLM.

        Returns:
            Parsed JSON object.

        Raises:
            ClassificationError: If no JSON object can be found or decoded.
        """
        # The model sometimes wraps the object in prose or markdown fences
        start_idx = response_text.find('{')
        end_idx = response_text.rfind('}') + 1

        if start_idx == -1 or end_idx == 0:
            raise ClassificationError("No JSON object found in response")

        try:
            parsed = json.loads(response_text[start_idx:end_idx])
        except json.JSONDecodeError as e:
            raise ClassificationError(f"Invalid JSON response: {e}")

        if not isinstance(parsed, dict):
            raise ClassificationError("Response JSON is not an object")

        return parsed

    def classify(self, text: str) -> ClassificationResult:
        """Classify a message.

        Args:
            text: The message body.

        Returns:
            ClassificationResult; the UNKNOWN sentinel when the API call or
            response parsing fails.
        """
        logger.info(f"Classifying message: {preview(text)}")
        self.total_requests += 1
        start = time.monotonic()

        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                system=SYSTEM_PROMPT,
                messages=[{
                    "role": "user",
                    "content": self.build_prompt(text)
                }]
            )

            response_text = response.content[0].text
            logger.debug(f"Raw LLM response: {response_text}")

            result = ClassificationResult.from_dict(self._parse_json_response(response_text))
            logger.info(
                f"Classified as {result.category.value} "
                f"(confidence {result.confidence:.2f})"
            )
            return result

        except anthropic.APITimeoutError as e:
            logger.error(f"Classification timed out after {self.timeout_seconds}s: {e}")
        except anthropic.APIError as e:
            logger.error(f"Anthropic API error: {e}")
        except ClassificationError as e:
            logger.error(f"Failed to parse classification result: {e}")
        except Exception as e:
            logger.error(f"Error classifying message: {e}")
        finally:
            self.total_duration += time.monotonic() - start

        self.failed_requests += 1
        return ClassificationResult.unknown()

    def get_model_info(self) -> Dict[str, Any]:
        """Get information about the current model configuration and usage."""
        average = self.total_duration / self.total_requests if self.total_requests else 0.0
        return {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "timeout_seconds": self.timeout_seconds,
            "provider": "anthropic",
            "total_requests": self.total_requests,
            "failed_requests": self.failed_requests,
            "average_duration_seconds": average,
        }
