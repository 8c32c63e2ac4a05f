"""Tests for the FanPulse MCP tool surface."""

import json

import pytest

from fanpulse.serving.fan_service import FanNotFoundError, FanPulseService
from fanpulse.serving.mcp_server import TOOL_NAMES, _respond, build_mcp_server
from fanpulse.storage.models.fan import KNOWN_EVENT_TYPES


class TestToolRegistration:
    @pytest.mark.asyncio
    async def test_exposes_the_seven_tools(self, service: FanPulseService) -> None:
        mcp = build_mcp_server(service)

        tools = await mcp.list_tools()

        assert sorted(tool.name for tool in tools) == sorted(TOOL_NAMES)

    @pytest.mark.asyncio
    async def test_tools_carry_descriptions(self, service: FanPulseService) -> None:
        tools = await build_mcp_server(service).list_tools()
        profile = next(t for t in tools if t.name == "get_fan_profile")

        assert "favorite team" in profile.description
        assert "fan_identifier" in profile.inputSchema["properties"]

    @pytest.mark.asyncio
    async def test_event_type_lists_known_kinds(self, service: FanPulseService) -> None:
        tools = await build_mcp_server(service).list_tools()
        log_tool = next(t for t in tools if t.name == "log_engagement_event")

        description = log_tool.inputSchema["properties"]["event_type"]["description"]
        for kind in KNOWN_EVENT_TYPES:
            assert kind in description


class TestRespond:
    def test_serialises_result_as_camel_case_json(self, service: FanPulseService) -> None:
        text = _respond("get_fan_segments", lambda: service.get_fan_segments())

        body = json.loads(text)
        assert body["teamFilter"] == "all"
        assert "\n  " in text

    def test_not_found_becomes_error_payload(self) -> None:
        def missing():
            raise FanNotFoundError("fan-999")

        body = json.loads(_respond("get_merch_recommendations", missing))

        assert body == {"error": "Fan not found", "fanId": "fan-999"}

    def test_other_errors_propagate(self) -> None:
        def broken():
            raise ValueError("bad input")

        with pytest.raises(ValueError):
            _respond("search_merchandise", broken)
