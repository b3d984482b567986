import pytest

from wealthwise.core.exceptions import LLMError
from wealthwise.core.llm_client import LLMClient, parse_json_object

from conftest import FakeAnthropic, reply, text_block, tool_block


def test_parse_plain_json():
    assert parse_json_object('{"a": 1}') == {'a': 1}


def test_parse_strips_markdown_fence():
    text = '```json\n{"category": "Transport"}\n```'
    assert parse_json_object(text) == {'category': 'Transport'}


def test_parse_ignores_surrounding_text():
    text = 'Here you go: {"amount": 5} hope that helps'
    assert parse_json_object(text) == {'amount': 5}


@pytest.mark.parametrize('text', ['', 'no json here', '{"broken": ', '[1, 2]'])
def test_parse_rejects_unusable_text(text):
    with pytest.raises(LLMError):
        parse_json_object(text)


def test_complete_json_sends_deterministic_request():
    fake = FakeAnthropic('{"ok": true}')
    client = LLMClient(client=fake, model='test-model')

    assert client.complete_json('hello', max_tokens=50) == {'ok': True}

    call = fake.messages.calls[0]
    assert call['model'] == 'test-model'
    assert call['max_tokens'] == 50
    assert call['temperature'] == 0.0
    assert call['messages'] == [{'role': 'user', 'content': 'hello'}]


def test_complete_json_wraps_sdk_errors():
    client = LLMClient(client=FakeAnthropic(RuntimeError('timeout')))
    with pytest.raises(LLMError, match='timeout'):
        client.complete_json('hello')


def test_disabled_without_api_key(monkeypatch):
    monkeypatch.delenv('ANTHROPIC_API_KEY', raising=False)
    client = LLMClient()
    assert not client.enabled
    with pytest.raises(LLMError):
        client.complete_json('hello')


def test_complete_json_rejects_reply_without_text_block():
    fake = FakeAnthropic(reply(tool_block('add_transaction', {})))
    client = LLMClient(client=fake)
    with pytest.raises(LLMError, match='no text content'):
        client.complete_json('hello')


def test_complete_json_skips_leading_non_text_blocks():
    fake = FakeAnthropic(reply(tool_block('noop', {}), text_block('{"a": 1}')))
    assert LLMClient(client=fake).complete_json('hello') == {'a': 1}


def test_complete_json_rejects_empty_content():
    client = LLMClient(client=FakeAnthropic(reply()))
    with pytest.raises(LLMError):
        client.complete_json('hello')


def test_chat_passes_system_tools_and_history():
    message = reply(text_block('Hi there'))
    fake = FakeAnthropic(message)
    client = LLMClient(client=fake, model='test-model')
    tools = [{'name': 'add_transaction', 'input_schema': {'type': 'object'}}]
    history = [{'role': 'user', 'content': 'hello'}]

    assert client.chat(history, system='be brief', tools=tools) is message

    call = fake.messages.calls[0]
    assert call['model'] == 'test-model'
    assert call['system'] == 'be brief'
    assert call['tools'] == tools
    assert call['messages'] == history


def test_chat_wraps_sdk_errors():
    client = LLMClient(client=FakeAnthropic(RuntimeError('overloaded')))
    with pytest.raises(LLMError, match='overloaded'):
        client.chat([{'role': 'user', 'content': 'hi'}])
