"""
LLM Client

Thin wrapper around the Anthropic Messages API. complete_json sends one
prompt and returns the JSON object the model answered with; chat sends a
conversation with tools and hands back the raw message. Every model-backed
agent (categorizer, insights, payment risk, chat) goes through here, so
tests can swap the SDK client for a fake.
"""
import os
import json
import logging
from typing import Any, Dict, List, Optional

import anthropic
from dotenv import load_dotenv

from .exceptions import LLMError


load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-20250514"


class LLMClient:
    """
    Sends prompts to Claude and parses JSON responses
    """

    def __init__(self,
                 api_key: Optional[str] = None,
                 model: Optional[str] = None,
                 client: Optional[Any] = None):
        """
        Args:
            api_key: Anthropic API key (or read from ANTHROPIC_API_KEY env var)
            model: Model name (or read from WEALTHWISE_MODEL env var)
            client: Pre-built SDK client exposing messages.create (used by tests)
        """
        self.model = model or os.environ.get('WEALTHWISE_MODEL', DEFAULT_MODEL)

        if client is not None:
            self.client = client
            self.enabled = True
            return

        self.api_key = api_key or os.environ.get('ANTHROPIC_API_KEY')
        if not self.api_key:
            logger.warning("No ANTHROPIC_API_KEY found. Model calls will fail.")
            self.client = None
            self.enabled = False
        else:
            self.client = anthropic.Anthropic(api_key=self.api_key)
            self.enabled = True

    def complete_json(self, prompt: str, max_tokens: int = 1000) -> Dict[str, Any]:
        """
        Send a prompt and return the JSON object from the reply

        Args:
            prompt: Full user prompt
            max_tokens: Response token ceiling

        Returns:
            Parsed JSON object

        Raises:
            LLMError: if the model is not configured, the call fails, or the
                reply holds no JSON object
        """
        if not self.enabled:
            raise LLMError("LLM client is not configured (missing ANTHROPIC_API_KEY)")

        try:
            message = self.client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                temperature=0.0,  # Deterministic
                messages=[{
                    "role": "user",
                    "content": prompt
                }]
            )
        except Exception as e:
            raise LLMError(f"Model call failed: {e}") from e

        return parse_json_object(first_text(message))

    def chat(self,
             messages: List[Dict[str, Any]],
             system: Optional[str] = None,
             tools: Optional[List[Dict[str, Any]]] = None,
             max_tokens: int = 1024) -> Any:
        """
        Send a conversation and return the raw model message

        The caller reads text and tool_use blocks off the returned message.

        Raises:
            LLMError: if the model is not configured or the call fails
        """
        if not self.enabled:
            raise LLMError("LLM client is not configured (missing ANTHROPIC_API_KEY)")

        kwargs: Dict[str, Any] = {
            "model": self.model,
            "max_tokens": max_tokens,
            "messages": messages,
        }
        if system:
            kwargs["system"] = system
        if tools:
            kwargs["tools"] = tools

        try:
            return self.client.messages.create(**kwargs)
        except Exception as e:
            raise LLMError(f"Model call failed: {e}") from e


def first_text(message: Any) -> str:
    """
    Text of the first text block in a model reply

    Raises:
        LLMError: if the reply has no text block
    """
    for block in getattr(message, 'content', None) or ():
        text = getattr(block, 'text', None)
        if isinstance(text, str):
            return text.strip()
    raise LLMError("Model returned no text content")


def parse_json_object(response_text: str) -> Dict[str, Any]:
    """
    Extract the JSON object from a model reply

    Handles markdown code fences and chatter before/after the object.
    """
    # Remove markdown code blocks if present
    if response_text.startswith('```'):
        lines = response_text.split('\n')
        response_text = '\n'.join(line for line in lines if not line.strip().startswith('```'))

    start_idx = response_text.find('{')
    end_idx = response_text.rfind('}')
    if start_idx == -1 or end_idx < start_idx:
        raise LLMError(f"No JSON object found in model response: {response_text[:200]!r}")

    try:
        result = json.loads(response_text[start_idx:end_idx + 1])
    except json.JSONDecodeError as e:
        raise LLMError(f"Model response not valid JSON: {e}") from e

    if not isinstance(result, dict):
        raise LLMError(f"Expected JSON object, got {type(result).__name__}")
    return result
