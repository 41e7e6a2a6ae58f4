"""Testes do envelope CloudEvent (api/connectors/uim/models.py)."""

from __future__ import annotations

import json

import pytest
from pydantic import BaseModel

from api.connectors.uim import CloudEvent, new_event
from app.infra.http import dump_json
from utils.errors import ClientError


class Message(BaseModel):
    account_id: str
    text: str


class TestNewEvent:
    """Criação de eventos."""

    def test_fields(self) -> None:
        event = new_event("provider.new_message", {"text": "oi"}, source="wechat")

        assert event.specversion == "1.0"
        assert event.type == "provider.new_message"
        assert event.source == "wechat"
        assert event.datacontenttype == "application/json"
        assert event.time is not None
        assert event.time.tzinfo is not None
        assert event.data == {"text": "oi"}

    def test_ids_are_unique(self) -> None:
        assert new_event("t").id != new_event("t").id

    def test_model_data_is_dumped(self) -> None:
        event = new_event("t", Message(account_id="a1", text="oi"))
        assert event.data == {"account_id": "a1", "text": "oi"}

    def test_serialization_omits_none(self) -> None:
        event = new_event("t", {"k": 1})

        wire = json.loads(dump_json(event))

        assert wire["type"] == "t"
        assert wire["data"] == {"k": 1}
        assert "subject" not in wire


class TestDataAs:
    """Decodificação de `data`."""

    def test_data_as_model(self) -> None:
        event = CloudEvent(id="1", type="t", data={"account_id": "a1", "text": "oi"})
        assert event.data_as(Message) == Message(account_id="a1", text="oi")

    def test_data_as_mismatch(self) -> None:
        event = CloudEvent(id="1", type="t", data={"text": "oi"})

        with pytest.raises(ClientError) as exc_info:
            event.data_as(Message)

        assert exc_info.value.error_code == "SDK.JsonUnmarshalError"
