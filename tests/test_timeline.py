"""Tests for the session timeline aggregate."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from blockterm.session import (
    AiBlockStatus,
    AiTool,
    SessionTimeline,
    TimelineKind,
)
from blockterm.session.ai import FAILED_EXIT_CODE
from blockterm.session.export import EXPORT_TITLE
from blockterm.session.timeline import CONTEXT_HEADER, CONTEXT_RULE


class TestCommandBlocks:
    def test_ids_start_at_zero_and_increase(self, timeline):
        assert timeline.start_command_block("ls", "/tmp") == 0
        assert timeline.start_command_block("pwd", "/tmp") == 1
        assert timeline.next_block_id == 2

    def test_new_block_is_running(self, timeline, clock):
        block_id = timeline.start_command_block("make", "/src")
        block = timeline.block_by_id(block_id)
        assert block.is_running
        assert block.exit_code is None
        assert block.working_directory == "/src"
        assert block.timestamp_unix_ms == 1_700_000_000_000

    def test_output_goes_to_most_recent_block(self, timeline):
        timeline.start_command_block("first", "/")
        timeline.start_command_block("second", "/")
        timeline.push_output_lines(["out"])
        assert timeline.block_by_id(0).output_lines == []
        assert timeline.block_by_id(1).output_lines == ["out"]

    def test_output_without_block_is_dropped(self, timeline):
        timeline.push_output_lines(["orphan"])
        assert timeline.block_count() == 0
        assert timeline.visible_lines(10) == []

    def test_finish_records_exit_code(self, timeline):
        block_id = timeline.start_command_block("false", "/")
        assert timeline.finish_command_block(block_id, 1, 15) is True
        block = timeline.block_by_id(block_id)
        assert (block.exit_code, block.duration_ms) == (1, 15)
        assert timeline.finish_command_block(99, 0, 0) is False

    def test_blank_command_creates_block_but_no_history(self, timeline):
        timeline.start_command_block("   ", "/")
        assert timeline.block_count() == 1
        assert timeline.history_recent(10) == []

    def test_toggle_bookmark_twice_restores_flag(self, populated_timeline):
        assert populated_timeline.toggle_bookmark(1) is True
        assert populated_timeline.bookmarked_count() == 1
        assert populated_timeline.toggle_bookmark(1) is False
        assert populated_timeline.bookmarked_count() == 0

    def test_toggle_unknown_block(self, timeline):
        assert timeline.toggle_bookmark(7) is None

    def test_ids_are_not_reused_after_removal(self, timeline):
        timeline.start_command_block("a", "/")
        timeline.start_command_block("b", "/")
        assert timeline.remove_command_block(1) is True
        assert timeline.remove_command_block(1) is False
        assert timeline.start_command_block("c", "/") == 2

    def test_readers_get_copies(self, populated_timeline):
        block = populated_timeline.block_by_id(0)
        block.output_lines.append("tampered")
        populated_timeline.blocks[0].output_lines.clear()
        assert populated_timeline.block_by_id(0).output_lines == [
            "Checking blockterm v0.1.0",
            "Finished dev",
        ]


class TestAiBlocks:
    def test_ids_start_at_one_independent_of_commands(self, timeline):
        timeline.start_command_block("ls", "/")
        assert timeline.start_ai_block(AiTool.CLAUDE_CODE, "hi", []) == 1
        assert timeline.start_ai_block(AiTool.CODEX_CLI, "again", []) == 2
        assert timeline.next_block_id == 1

    def test_lifecycle_to_completion(self, timeline):
        ai_id = timeline.start_ai_block(AiTool.CLAUDE_CODE, "explain", [0, 3])
        assert timeline.running_ai_count() == 1
        assert timeline.append_ai_output_lines(ai_id, ["line one", "line two"])
        assert timeline.complete_ai_block(ai_id, 0, 250)

        block = timeline.ai_block_by_id(ai_id)
        assert block.status is AiBlockStatus.COMPLETED
        assert block.exit_code == 0
        assert block.duration_ms == 250
        assert block.output_lines == ["line one", "line two"]
        assert block.context_block_ids == [0, 3]
        assert timeline.running_ai_count() == 0

    def test_fail_appends_message_and_sets_sentinel_exit_code(self, timeline):
        ai_id = timeline.start_ai_block(AiTool.CODEX_CLI, "go", [])
        timeline.append_ai_output_lines(ai_id, ["partial"])
        assert timeline.fail_ai_block(ai_id, "spawn failed: not found", 5)

        block = timeline.ai_block_by_id(ai_id)
        assert block.status is AiBlockStatus.FAILED
        assert block.exit_code == FAILED_EXIT_CODE == -1
        assert block.output_lines == ["partial", "spawn failed: not found"]

    def test_second_terminal_transition_overwrites_first(self, timeline):
        # No guard exists: whichever outcome is recorded last wins.
        ai_id = timeline.start_ai_block(AiTool.CLAUDE_CODE, "go", [])
        timeline.complete_ai_block(ai_id, 0, 10)
        timeline.fail_ai_block(ai_id, "killed", 20)
        block = timeline.ai_block_by_id(ai_id)
        assert block.status is AiBlockStatus.FAILED
        assert block.duration_ms == 20

        timeline.complete_ai_block(ai_id, 3, 30)
        block = timeline.ai_block_by_id(ai_id)
        assert block.status is AiBlockStatus.COMPLETED
        assert block.exit_code == 3

    def test_unknown_ai_ids_are_reported(self, timeline):
        assert timeline.append_ai_output_lines(5, ["x"]) is False
        assert timeline.complete_ai_block(5, 0, 0) is False
        assert timeline.fail_ai_block(5, "x", 0) is False
        assert timeline.remove_ai_block(5) is False

    def test_removed_ai_id_is_not_reused(self, timeline):
        ai_id = timeline.start_ai_block(AiTool.CLAUDE_CODE, "a", [])
        assert timeline.remove_ai_block(ai_id)
        assert timeline.start_ai_block(AiTool.CLAUDE_CODE, "b", []) == ai_id + 1


class TestQueries:
    def test_search_is_most_recent_first(self, populated_timeline):
        assert populated_timeline.search_block_ids("cargo", 10) == [1, 0]

    def test_search_matches_output_case_insensitively(self, populated_timeline):
        assert populated_timeline.search_block_ids("FAILED", 10) == [1]

    def test_search_limits_and_blank_query(self, populated_timeline):
        assert populated_timeline.search_block_ids("cargo", 1) == [1]
        assert populated_timeline.search_block_ids("  ", 10) == []

    def test_history_queries(self, populated_timeline):
        assert populated_timeline.history_recent(5) == ["cargo check", "cargo test"]
        assert populated_timeline.history_search("test", 5) == ["cargo test"]

    def test_visible_lines_flatten_commands_and_pending_line(self, populated_timeline):
        populated_timeline.set_pending_line("$ ")
        assert populated_timeline.visible_lines(4) == [
            "$ cargo test",
            "running 3 tests",
            "test result: FAILED",
            "$ ",
        ]
        assert populated_timeline.visible_lines(0) == []

    def test_context_payload_format(self, populated_timeline):
        payload = populated_timeline.build_context_payload([1, 42], 1)
        assert payload == (
            f"{CONTEXT_HEADER}\n"
            f"{CONTEXT_RULE}\n"
            "Block #1\n"
            "Command: cargo test\n"
            "CWD: /repo\n"
            "Output:\n"
            "  test result: FAILED\n"
            "\n"
        )

    def test_context_rule_is_fixed_width(self, populated_timeline):
        lines = populated_timeline.build_context_payload([0], 40).splitlines()
        assert lines[1] == "=" * 32

    def test_context_payload_keeps_requested_order(self, populated_timeline):
        payload = populated_timeline.build_context_payload([1, 0], 40)
        assert payload.index("Block #1") < payload.index("Block #0")

    def test_context_payload_empty_selection(self, populated_timeline):
        assert populated_timeline.build_context_payload([], 40) == ""


class TestTimelineOrdering:
    def test_items_sorted_by_start_time(self, populated_timeline):
        items = populated_timeline.timeline_items()
        assert [(item.kind, item.id) for item in items] == [
            (TimelineKind.COMMAND, 0),
            (TimelineKind.COMMAND, 1),
            (TimelineKind.AI, 1),
        ]

    def test_commands_sort_before_ai_on_ties(self):
        timeline = SessionTimeline(clock=lambda: 1000)
        timeline.start_ai_block(AiTool.CLAUDE_CODE, "first", [])
        timeline.start_command_block("ls", "/")
        items = timeline.timeline_items()
        assert [item.kind for item in items] == [TimelineKind.COMMAND, TimelineKind.AI]

    def test_ordering_is_stable_across_calls(self, populated_timeline):
        first = [item.sort_key() for item in populated_timeline.timeline_items()]
        second = [item.sort_key() for item in populated_timeline.timeline_items()]
        assert first == second

    @given(
        events=st.lists(
            st.tuples(st.booleans(), st.integers(min_value=0, max_value=5)),
            max_size=30,
        )
    )
    def test_items_are_always_sorted(self, events):
        stamps = iter([stamp for _, stamp in events])
        timeline = SessionTimeline(clock=lambda: next(stamps))
        for is_ai, _ in events:
            if is_ai:
                timeline.start_ai_block(AiTool.CODEX_CLI, "p", [])
            else:
                timeline.start_command_block("c", "/")

        keys = [item.sort_key() for item in timeline.timeline_items()]
        assert keys == sorted(keys)
        assert len(keys) == len(events)


class TestExport:
    def test_export_contains_every_block(self, populated_timeline):
        markdown = populated_timeline.export_markdown()
        assert markdown.startswith(f"{EXPORT_TITLE}\n\n")
        assert "## Block #0" in markdown
        assert "## Block #1" in markdown
        assert "- Exit Code: `101`" in markdown
        assert "- Bookmarked: `false`" in markdown
        assert "```text\nrunning 3 tests\ntest result: FAILED\n```" in markdown

    def test_bookmarks_only(self, populated_timeline):
        populated_timeline.toggle_bookmark(0)
        markdown = populated_timeline.export_markdown(bookmarks_only=True)
        assert "## Block #0" in markdown
        assert "## Block #1" not in markdown
        assert "- Bookmarked: `true`" in markdown

    def test_running_block_exports_none_exit_code(self, timeline):
        timeline.start_command_block("sleep 10", "/")
        assert "- Exit Code: `None`" in timeline.export_markdown()

    def test_pending_line_section_only_when_non_blank(self, populated_timeline):
        populated_timeline.set_pending_line("   ")
        assert "## Pending Line" not in populated_timeline.export_markdown()
        populated_timeline.set_pending_line("user@host $ ")
        assert populated_timeline.export_markdown().endswith(
            "## Pending Line\n\n```text\nuser@host $ \n```\n"
        )


class TestClearTimeline:
    def test_clear_keeps_history_and_counters(self, populated_timeline):
        populated_timeline.set_pending_line("partial")
        populated_timeline.clear_timeline()

        assert populated_timeline.block_count() == 0
        assert populated_timeline.ai_block_count() == 0
        assert populated_timeline.pending_line == ""
        assert populated_timeline.history_recent(5) == ["cargo check", "cargo test"]
        assert populated_timeline.start_command_block("ls", "/") == 2
        assert populated_timeline.start_ai_block(AiTool.CLAUDE_CODE, "x", []) == 2


@pytest.mark.parametrize("tool", list(AiTool))
def test_tool_metadata(tool):
    assert tool.label
    assert tool.binary_name in {"claude", "codex"}
