"""Tests for the knowledge index builder."""

from playground.core.knowledge_index import (
    FALLBACK_PROJECT_NAMES,
    build_indexes,
    build_project_names,
    expand_lesson,
    lesson_rank,
    sort_lessons,
)
from playground.core.schemas_kb import Lesson, SupportReason
from tests.fixtures_kb import (
    BACK_TO_BACK_PAGES_KB,
    MOOD_LAMP_CODING_URL,
    MOOD_LAMP_CONNECT_URL,
    PAGES_KB,
    sample_kb,
)


class TestProjectNames:
    """Canonical project-name resolution."""

    def test_explicit_list_wins_and_dedupes(self):
        kb = sample_kb()
        kb["project_names"] = ["Robo Arm", {"name": "Mood Lamp"}, "Robo Arm", {"title": "ignored"}]
        assert build_project_names(kb) == ["Robo Arm", "Mood Lamp"]

    def test_structured_projects_used_when_no_explicit_list(self):
        assert build_project_names(sample_kb()) == ["Mood Lamp", "Candle Lamp", "Robo Arm"]

    def test_page_scan_fallback(self):
        assert build_project_names(PAGES_KB) == ["Mood Lamp", "Traffic Light"]

    def test_fixed_fallback_when_kb_names_nothing(self):
        assert build_project_names({}) == FALLBACK_PROJECT_NAMES

    def test_names_are_kept_verbatim(self):
        kb = {"projectNames": ["Mood Lamp", "mood lamp"]}
        assert build_project_names(kb) == ["Mood Lamp", "mood lamp"]


class TestProjectBlocks:
    """Structured and page-scanned project content blocks."""

    def test_structured_block_field_order(self):
        indexes = build_indexes(sample_kb())
        block = indexes.project_blocks["Mood Lamp"]
        lines = block.splitlines()
        assert lines[0] == "Project: Mood Lamp"
        assert lines[1] == "Difficulty: Easy"
        assert lines[2] == "Estimated time: 30 minutes"
        assert lines[3].startswith("Description: ")
        assert lines[4] == "Components: RGB LED, Potentiometer"
        assert lines[5] == "Build steps:"
        assert lines[6] == "1. Connect the RGB LED to Port 1."
        assert lines[8] == "3. Upload the mood lamp code."
        assert lines[9].startswith("How it works: ")

    def test_absent_fields_are_skipped_and_unknown_ids_pass_through(self):
        indexes = build_indexes(sample_kb())
        block = indexes.project_blocks["Robo Arm"]
        assert "Estimated time" not in block
        assert "How it works" not in block
        assert "Components: Servo Motor, Potentiometer, gripper_claw" in block

    def test_alias_lookup_is_case_insensitive(self):
        kb = sample_kb()
        kb["project_names"] = ["Colour Lamp"]
        indexes = build_indexes(kb)
        assert "Project: Mood Lamp" in indexes.project_blocks["Colour Lamp"]

    def test_every_project_name_has_a_block(self):
        kb = sample_kb()
        kb["project_names"] = ["Mood Lamp", "Ghost Project"]
        indexes = build_indexes(kb)
        assert set(indexes.project_blocks) == {"Mood Lamp", "Ghost Project"}
        assert indexes.project_blocks["Ghost Project"] == ""

    def test_page_block_is_sanitized(self):
        indexes = build_indexes(PAGES_KB)
        block = indexes.project_blocks["Mood Lamp"]
        assert block.startswith("Project Name: Mood Lamp")
        assert "\x00" not in block
        assert "\n\n\n" not in block
        assert all(line == line.rstrip() for line in block.splitlines())

    def test_page_block_stops_at_next_project(self):
        block = build_indexes(PAGES_KB).project_blocks["Mood Lamp"]
        assert "Lesson ID: ML-1" in block
        assert "Traffic Light" not in block
        assert "Port 1" not in block

    def test_back_to_back_project_pages_stay_separate(self):
        indexes = build_indexes(BACK_TO_BACK_PAGES_KB)
        assert indexes.project_names == ["Mood Lamp", "Candle Lamp"]
        assert "Candle Lamp" not in indexes.project_blocks["Mood Lamp"]
        assert "Mood Lamp" not in indexes.project_blocks["Candle Lamp"]
        assert "cl-build" in indexes.project_blocks["Candle Lamp"]

    def test_page_block_keeps_following_page_limit(self):
        pages = ["Project Name: Smart Fan"] + [f"Fan note {i}" for i in range(1, 8)]
        block = build_indexes({"pages": pages}).project_blocks["Smart Fan"]
        assert "Fan note 5" in block
        assert "Fan note 6" not in block

    def test_fallback_names_have_empty_blocks(self):
        indexes = build_indexes({})
        assert indexes.project_names == FALLBACK_PROJECT_NAMES
        assert all(block == "" for block in indexes.project_blocks.values())


class TestLessons:
    """Lesson expansion, de-duplication and ordering."""

    def test_topical_rank_order(self):
        names = ["Intro", "Misc Extras", "Working Demo", "Coding", "Build", "Connection"]
        ordered = sort_lessons([Lesson(name=n) for n in names])
        assert [lesson.name for lesson in ordered] == [
            "Connection",
            "Build",
            "Coding",
            "Working Demo",
            "Intro",
            "Misc Extras",
        ]

    def test_equal_ranks_keep_original_order(self):
        ordered = sort_lessons([Lesson(name="Build B"), Lesson(name="Extra"), Lesson(name="Build A")])
        assert [lesson.name for lesson in ordered] == ["Build B", "Build A", "Extra"]

    def test_rank_is_case_insensitive(self):
        assert lesson_rank("CONNECTION SETUP") == 0
        assert lesson_rank("Let's write code") == 2
        assert lesson_rank("Something else") == 5

    def test_rank_ignores_project_name_prefix(self):
        assert lesson_rank("Code Breaker Intro", "Code Breaker") == 4
        ordered = sort_lessons(
            [Lesson(name="Build-a-Bot Intro"), Lesson(name="Build-a-Bot Connection")],
            "Build-a-Bot",
        )
        assert [lesson.name for lesson in ordered] == ["Build-a-Bot Connection", "Build-a-Bot Intro"]

    def test_rank_keywords_match_whole_words(self):
        assert lesson_rank("Barcode Scanner") == 5
        assert lesson_rank("Rebuilder Tour") == 5
        assert lesson_rank("Building the case") == 1

    def test_page_lessons_stay_with_their_project(self):
        indexes = build_indexes(BACK_TO_BACK_PAGES_KB)
        assert [lesson.name for lesson in indexes.lesson_index["Mood Lamp"]] == ["Mood Lamp Connection"]
        assert [lesson.name for lesson in indexes.lesson_index["Candle Lamp"]] == ["Candle Lamp Build"]

    def test_duplicate_links_collapse_to_one(self):
        lessons = expand_lesson("Setup", ["https://v.example.com/a", "https://v.example.com/a"])
        assert len(lessons) == 1
        assert lessons[0].name == "Setup"
        assert lessons[0].videos == ["https://v.example.com/a"]

    def test_multiple_links_become_parts(self):
        lessons = expand_lesson("Build", ["https://v.example.com/1", "https://v.example.com/2"], "Do it")
        assert [lesson.name for lesson in lessons] == ["Build Part 1", "Build Part 2"]
        assert [lesson.videos for lesson in lessons] == [["https://v.example.com/1"], ["https://v.example.com/2"]]
        assert all(lesson.explanation == "Do it" for lesson in lessons)

    def test_structured_lessons_sorted_and_deduped(self):
        indexes = build_indexes(sample_kb())
        lessons = indexes.lesson_index["Mood Lamp"]
        assert [lesson.name for lesson in lessons] == ["Mood Lamp Connection Setup", "Mood Lamp Coding"]
        assert lessons[0].videos == [MOOD_LAMP_CONNECT_URL]
        assert lessons[0].explanation == "Plug the parts into the right ports."
        assert lessons[1].videos == [MOOD_LAMP_CODING_URL]

    def test_global_lesson_list_is_matched_by_project(self):
        kb = sample_kb()
        kb["lessons"] = [
            {"project": "robo arm", "title": "Robo Arm Intro", "url": "https://v.example.com/arm"},
            {"project": "Unknown", "title": "Stray", "url": "https://v.example.com/stray"},
        ]
        indexes = build_indexes(kb)
        assert [lesson.name for lesson in indexes.lesson_index["Robo Arm"]] == ["Robo Arm Intro"]

    def test_page_scanned_lessons(self):
        indexes = build_indexes(PAGES_KB)
        lessons = indexes.lesson_index["Mood Lamp"]
        assert [lesson.name for lesson in lessons] == [
            "Mood Lamp Connection Part 1",
            "Mood Lamp Connection Part 2",
            "Mood Lamp Coding Part 1",
        ]
        coding = lessons[2]
        assert coding.videos == ["https://videos.example.com/ml-code"]
        assert coding.explanation == "Write code that reads the knob and sets the colour."
        assert indexes.lesson_index["Traffic Light"] == []


class TestGlobalSections:
    """Pin, safety, overview, component and support extraction."""

    def test_explicit_pin_and_safety(self):
        indexes = build_indexes(sample_kb())
        assert indexes.pin_text == "Port 1: Output devices (lights, buzzer)\nPort 2: Input devices (knobs, sensors)"
        assert indexes.safety_text == "- Use only the kit battery pack.\n- Disconnect power before rewiring."

    def test_pin_text_from_pages_takes_two_following_pages(self):
        indexes = build_indexes(PAGES_KB)
        assert indexes.pin_text.startswith("Fixed Port Mappings")
        assert "Port 4: sensors" in indexes.pin_text
        assert "Port 5: spare" not in indexes.pin_text

    def test_safety_and_overview_from_pages(self):
        indexes = build_indexes(PAGES_KB)
        assert indexes.safety_text.startswith("Global Safety\nNever use wall power.")
        assert "Kit Overview" in indexes.kit_overview

    def test_missing_sections_are_empty(self):
        indexes = build_indexes({"projects": [{"name": "Mood Lamp"}]})
        assert indexes.pin_text == ""
        assert indexes.safety_text == ""
        assert indexes.kit_overview == ""
        assert indexes.component_index == {}

    def test_component_index_from_structured_list(self):
        indexes = build_indexes(sample_kb())
        assert list(indexes.component_index) == ["rgb_led", "pot", "servo", "ldr", "flicker_led"]
        assert indexes.component_index["servo"].name == "Servo Motor"
        assert indexes.component_index["servo"].category == "Motion"

    def test_component_index_from_component_pages(self):
        indexes = build_indexes(PAGES_KB)
        assert list(indexes.component_index) == ["rgb_led", "pot"]
        assert indexes.component_index["pot"].description == "Turn knob"

    def test_support_config(self):
        config = build_indexes(sample_kb()).support_config
        assert config.enabled is True
        assert SupportReason.PART_MISSING in config.triggers
        assert SupportReason.UNKNOWN_COMPONENT not in config.triggers
        assert config.email == "help@example.com"
        assert config.hours == "Mon-Fri 9am-5pm"

    def test_support_config_ignores_unknown_reasons(self):
        kb = {"support": {"enabled": "true", "reasons": ["part missing", "bogus"], "email": "a@b.c"}}
        config = build_indexes(kb).support_config
        assert config.enabled is True
        assert config.triggers == {SupportReason.PART_MISSING}
        assert config.email == "a@b.c"


class TestRobustness:
    """Malformed but parseable KB documents never raise."""

    def test_non_object_kb(self):
        indexes = build_indexes(["not", "an", "object"])
        assert indexes.project_names == FALLBACK_PROJECT_NAMES

    def test_malformed_fields(self):
        kb = {
            "projects": [None, 7, {"name": "Mood Lamp", "steps": "Just one step", "lessons": "Intro"}],
            "components": "oops",
            "pages": [None, 3, {"text": 5}],
            "support": ["not", "a", "dict"],
            "pin_map": 42,
        }
        indexes = build_indexes(kb)
        assert indexes.project_names == ["Mood Lamp"]
        assert "1. Just one step" in indexes.project_blocks["Mood Lamp"]
        assert [lesson.name for lesson in indexes.lesson_index["Mood Lamp"]] == ["Intro"]
        assert indexes.support_config.enabled is False

    def test_building_twice_is_identical(self):
        first = build_indexes(sample_kb())
        second = build_indexes(sample_kb())
        assert first.project_names == second.project_names
        assert first.project_blocks == second.project_blocks
        assert first.lesson_index == second.lesson_index

        first_pages = build_indexes(PAGES_KB)
        second_pages = build_indexes(PAGES_KB)
        assert first_pages.model_dump() == second_pages.model_dump()
