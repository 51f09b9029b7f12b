"""Tests for tool-call fragment assembly."""

import pytest

from azure_mcp_agent.utils.providers.base import ToolCallFragment
from azure_mcp_agent.utils.tool_calls import ToolCallAccumulator, ToolCallRequest


class TestToolCallAccumulator:
    """Tests for the fragment accumulator."""

    def test_single_call_split_arguments(self):
        """Argument continuations are concatenated in arrival order."""
        acc = ToolCallAccumulator()
        acc.add(ToolCallFragment(index=0, id="call_1", name="group_list", arguments='{"sub'))
        acc.add(ToolCallFragment(index=0, arguments='scription": "s1"}'))

        requests = acc.requests()
        assert requests == [
            ToolCallRequest(id="call_1", name="group_list", arguments='{"subscription": "s1"}')
        ]

    def test_interleaved_positions(self):
        """Fragments for different positions may interleave."""
        acc = ToolCallAccumulator()
        acc.add(ToolCallFragment(index=0, id="a", name="first", arguments='{"x"'))
        acc.add(ToolCallFragment(index=1, id="b", name="second", arguments='{"y"'))
        acc.add(ToolCallFragment(index=0, arguments=": 1}"))
        acc.add(ToolCallFragment(index=1, arguments=": 2}"))

        first, second = acc.requests()
        assert (first.id, first.name, first.arguments) == ("a", "first", '{"x": 1}')
        assert (second.id, second.name, second.arguments) == ("b", "second", '{"y": 2}')

    def test_requests_sorted_by_index(self):
        """Requests come back in position order, not arrival order."""
        acc = ToolCallAccumulator()
        acc.add(ToolCallFragment(index=2, id="c", name="third"))
        acc.add(ToolCallFragment(index=0, id="a", name="first"))
        acc.add(ToolCallFragment(index=1, id="b", name="second"))

        assert [r.id for r in acc.requests()] == ["a", "b", "c"]

    def test_name_before_id(self):
        """Id and name may arrive in separate fragments."""
        acc = ToolCallAccumulator()
        acc.add(ToolCallFragment(index=0, name="storage_account_list"))
        acc.add(ToolCallFragment(index=0, id="call_9"))

        (request,) = acc.requests()
        assert request.id == "call_9"
        assert request.name == "storage_account_list"

    def test_first_id_and_name_win(self):
        """Later fragments do not overwrite id or name."""
        acc = ToolCallAccumulator()
        acc.add(ToolCallFragment(index=0, id="call_1", name="one"))
        acc.add(ToolCallFragment(index=0, id="call_2", name="two", arguments="{}"))

        (request,) = acc.requests()
        assert (request.id, request.name, request.arguments) == ("call_1", "one", "{}")

    def test_len_counts_positions(self):
        """Length counts positions, not fragments."""
        acc = ToolCallAccumulator()
        assert len(acc) == 0
        acc.add(ToolCallFragment(index=0, id="a"))
        acc.add(ToolCallFragment(index=0, arguments="{}"))
        assert len(acc) == 1


class TestToolCallRequest:
    """Tests for complete tool call requests."""

    def test_parse_arguments(self):
        """JSON object arguments are decoded."""
        request = ToolCallRequest(id="a", name="t", arguments='{"query": "Resources"}')
        assert request.parse_arguments() == {"query": "Resources"}

    def test_empty_arguments(self):
        """Empty argument string means no arguments."""
        assert ToolCallRequest(id="a", name="t").parse_arguments() == {}
        assert ToolCallRequest(id="a", name="t", arguments="  ").parse_arguments() == {}

    def test_invalid_json(self):
        """Malformed JSON raises ValueError."""
        with pytest.raises(ValueError):
            ToolCallRequest(id="a", name="t", arguments='{"query": ').parse_arguments()

    def test_non_object_arguments(self):
        """Arguments must be a JSON object."""
        with pytest.raises(ValueError, match="JSON object"):
            ToolCallRequest(id="a", name="t", arguments="[1, 2]").parse_arguments()

    def test_to_message_dict(self):
        """Assistant tool_calls entry format."""
        request = ToolCallRequest(id="call_1", name="group_list", arguments="{}")
        assert request.to_message_dict() == {
            "id": "call_1",
            "type": "function",
            "function": {"name": "group_list", "arguments": "{}"},
        }
