"""Tests for KB text and reply cleanup."""

from playground.core.text_cleanup import clean_reply, collapse_alnum, sanitize_kb_text


class TestSanitizeKbText:
    def test_strips_nulls_and_trailing_space(self):
        assert sanitize_kb_text("Mood Lamp\x00   \r\nPort 1\t") == "Mood Lamp\nPort 1"

    def test_collapses_blank_runs(self):
        assert sanitize_kb_text("a\n\n\n\n\nb") == "a\n\nb"

    def test_empty(self):
        assert sanitize_kb_text("") == ""
        assert sanitize_kb_text(None) == ""


class TestCleanReply:
    def test_strips_markdown(self):
        raw = "## Your lamp\n**Turn** the knob and watch it *glow*!"
        assert clean_reply(raw) == "Your lamp\nTurn the knob and watch it glow!"

    def test_keeps_list_bullets(self):
        raw = "* Connect the LED\n* Connect the knob"
        assert clean_reply(raw) == raw

    def test_stray_markers_removed(self):
        assert clean_reply("Great **job") == "Great job"

    def test_collapses_blank_lines(self):
        assert clean_reply("Step one.\n\n\n\nStep two.\n") == "Step one.\n\nStep two."

    def test_blank_reply(self):
        assert clean_reply("  \n ") == ""


def test_collapse_alnum():
    assert collapse_alnum("Line-Follower Robot!") == "linefollowerrobot"
