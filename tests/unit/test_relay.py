"""
Tests unitaires pour le relais de messages vers le backend.
"""
import pytest

from opencode_bridge.core.exceptions import RelayError
from opencode_bridge.core.models import RelayResult
from opencode_bridge.proxy.relay import parse_backend_reply, relay, select_task_message


class TestSelectTaskMessage:
    """Sélection du dernier vrai message utilisateur."""
    
    def test_picks_most_recent_user_message(self, sample_messages):
        assert select_task_message(sample_messages) == "Écris un tri rapide"
    
    def test_skips_count_probe_and_short_messages(self):
        messages = [
            {"role": "user", "content": "première vraie tâche"},
            {"role": "user", "content": "ok"},
            {"role": "user", "content": "count"},
            {"role": "assistant", "content": "réponse assistant longue"},
        ]
        assert select_task_message(messages) == "première vraie tâche"
    
    def test_three_characters_is_enough(self):
        assert select_task_message([{"role": "user", "content": "abc"}]) == "abc"
    
    def test_ignores_other_roles(self):
        messages = [
            {"role": "system", "content": "consignes système"},
            {"role": "assistant", "content": "bonjour à vous"},
        ]
        assert select_task_message(messages) is None
    
    def test_malformed_input(self):
        assert select_task_message(None) is None
        assert select_task_message([None, "user", {"role": "user"}]) is None


class TestParseBackendReply:
    """Conversion de la réponse backend."""
    
    def test_concatenates_text_parts_in_order(self):
        reply = {
            "parts": [
                {"type": "text", "text": "Hel"},
                {"type": "tool", "tool": "bash", "state": {}},
                {"type": "text", "text": "lo"},
                {"type": "reasoning", "text": "caché"},
            ],
            "info": {"tokens": {"total": 12, "input": 5, "output": 7}},
        }
        assert parse_backend_reply(reply) == RelayResult(text="Hello", tokens=12)
    
    def test_missing_token_info_is_zero(self):
        reply = {"parts": [{"type": "text", "text": "abcdefgh"}]}
        # Pas d'estimation de secours
        assert parse_backend_reply(reply) == RelayResult(text="abcdefgh", tokens=0)
    
    def test_garbage_reply(self):
        assert parse_backend_reply(None) == RelayResult(text="", tokens=0)
        assert parse_backend_reply({"parts": "x", "info": {"tokens": "y"}}) == RelayResult(text="", tokens=0)


@pytest.mark.asyncio
async def test_relay_count_probe_does_not_call_backend(backend_client, fake_backend):
    result = await relay(backend_client, "ses_1", [{"role": "user", "content": "count"}])
    assert result == RelayResult(text="OK", tokens=0)
    assert fake_backend.calls == []


@pytest.mark.asyncio
async def test_relay_sends_single_text_part(backend_client, fake_backend):
    result = await relay(backend_client, "ses_1", [{"role": "user", "content": "hi there"}])
    
    assert result == RelayResult(text="hello", tokens=7)
    assert fake_backend.calls == [
        ("POST", "/session/ses_1/message", {"parts": [{"type": "text", "text": "hi there"}]}),
    ]


@pytest.mark.asyncio
async def test_relay_forwards_only_latest_user_message(backend_client, fake_backend, sample_messages):
    await relay(backend_client, "ses_9", sample_messages)
    
    _, _, body = fake_backend.calls[0]
    assert body == {"parts": [{"type": "text", "text": "Écris un tri rapide"}]}


@pytest.mark.asyncio
async def test_relay_backend_failure_raises(backend_client, fake_backend):
    fake_backend.message_status = 502
    
    with pytest.raises(RelayError) as exc_info:
        await relay(backend_client, "ses_1", [{"role": "user", "content": "hi there"}])
    
    assert exc_info.value.status_code == 502
    # Pas de retry
    assert fake_backend.message_sends == 1
