"""
Chat Assistant

Wally, the conversational front end. Each turn goes to Claude with the
add_transaction tool attached; the caller decides what to do with a tool
request.
"""
import re
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .exceptions import InvalidInputError
from .llm_client import LLMClient
from .models import ChatReply


logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are Wally, a friendly financial assistant. Keep your responses concise and helpful."

ADD_TRANSACTION_TOOL = 'add_transaction'

TOOLS = [
    {
        "name": ADD_TRANSACTION_TOOL,
        "description": "Add a transaction the user describes, e.g. "
                       "'spent 25 dollars on lunch with friends'.",
        "input_schema": {
            "type": "object",
            "properties": {
                "description": {
                    "type": "string",
                    "description": "The transaction as the user described it",
                },
            },
            "required": ["description"],
        },
    },
]

# Stage directions like "[laughs]" from speech transcripts
BRACKETED = re.compile(r'\[.*?\]')

# History roles from the web client -> Messages API roles
ROLE_MAP = {'user': 'user', 'model': 'assistant', 'assistant': 'assistant'}


def clean_message(message: str) -> str:
    return BRACKETED.sub('', message).strip()


def build_messages(history: Optional[Iterable[Mapping[str, Any]]], message: str) -> List[Dict[str, str]]:
    """Prior turns plus the new user message, skipping unusable history entries"""
    messages = []
    for turn in history or ():
        role = ROLE_MAP.get(turn.get('role'))
        content = turn.get('content')
        if role is None or not isinstance(content, str) or not content.strip():
            logger.debug("Skipping history entry: %r", turn)
            continue
        messages.append({"role": role, "content": content})
    messages.append({"role": "user", "content": message})
    return messages


class ChatAssistant:
    """
    Answers chat messages and spots requests to add transactions
    """

    def __init__(self, llm_client: Optional[LLMClient] = None, max_tokens: int = 256):
        self.llm_client = llm_client or LLMClient()
        self.max_tokens = max_tokens

    def respond(self,
                message: str,
                history: Optional[Iterable[Mapping[str, Any]]] = None) -> ChatReply:
        """
        Send one user turn to the model

        Args:
            message: What the user said
            history: Earlier turns as {'role': 'user'|'model', 'content': str}

        Returns:
            ChatReply carrying the first tool request if there is one,
            otherwise the reply text (possibly empty)

        Raises:
            InvalidInputError: if the message is empty after cleaning
            LLMError: if the model call fails
        """
        cleaned = clean_message(message) if isinstance(message, str) else ''
        if not cleaned:
            raise InvalidInputError("Message is required")

        response = self.llm_client.chat(
            build_messages(history, cleaned),
            system=SYSTEM_PROMPT,
            tools=TOOLS,
            max_tokens=self.max_tokens,
        )
        return parse_reply(response)


def parse_reply(response: Any) -> ChatReply:
    texts = []
    for block in getattr(response, 'content', None) or ():
        block_type = getattr(block, 'type', None)
        if block_type == 'tool_use':
            tool_input = getattr(block, 'input', None)
            return ChatReply(
                tool_name=getattr(block, 'name', None),
                tool_input=dict(tool_input) if isinstance(tool_input, Mapping) else {},
            )
        text = getattr(block, 'text', None)
        if isinstance(text, str):
            texts.append(text)
    return ChatReply(text=''.join(texts).strip())
