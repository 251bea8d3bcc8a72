"""Tests for tag extraction from note text."""

from dailyreview.tags import extract_metadata_block, extract_metadata_tags, extract_tags


# ---------------------------------------------------------------------------
# Inline tags
# ---------------------------------------------------------------------------


class TestInlineTags:
    def test_simple(self):
        assert extract_tags("Thinking about #python today") == {"#python"}

    def test_multiple_and_duplicates(self):
        assert extract_tags("#a and #b and #a again") == {"#a", "#b"}

    def test_hyphen_and_underscore(self):
        assert extract_tags("#to-do #big_idea") == {"#to-do", "#big_idea"}

    def test_unicode_letters(self):
        assert extract_tags("#café #日本語") == {"#café", "#日本語"}

    def test_not_preceded_by_word_char(self):
        assert extract_tags("see page#anchor and issue#12") == set()

    def test_heading_is_not_a_tag(self):
        assert extract_tags("# Title\n## Section") == set()

    def test_after_punctuation(self):
        assert extract_tags("(#wrapped), start:#x") == {"#wrapped", "#x"}

    def test_no_tags(self):
        assert extract_tags("plain text") == set()

    def test_empty(self):
        assert extract_tags("") == set()


# ---------------------------------------------------------------------------
# Metadata block
# ---------------------------------------------------------------------------


class TestMetadataBlock:
    def test_extract_block(self):
        text = "---\ntitle: x\n---\nbody"
        assert extract_metadata_block(text) == "title: x"

    def test_block_must_lead(self):
        assert extract_metadata_block("intro\n---\ntags: [a]\n---\n") is None

    def test_unterminated_block(self):
        text = "---\ntags: [\"a\"]\nno closing line"
        assert extract_metadata_block(text) is None
        assert extract_tags(text) == set()

    def test_bracketed_quoted_list_adds_prefix(self):
        text = '---\ntags: ["#a", "b"]\n---\nbody'
        assert extract_tags(text) == {"#a", "#b"}

    def test_single_quoted_list(self):
        text = "---\ntags: ['x', 'y']\n---\n"
        assert extract_metadata_tags(text) == {"#x", "#y"}

    def test_yaml_sub_list(self):
        text = "---\ntitle: Note\ntags:\n  - one\n  - two\nstatus: draft\n---\nbody"
        assert extract_metadata_tags(text) == {"#one", "#two"}

    def test_sub_list_with_hash_values(self):
        """'- #a' reads as a YAML comment; the line scanner still finds it."""
        text = "---\ntags:\n  - #a\n  - b\n---\n"
        assert extract_metadata_tags(text) == {"#a", "#b"}

    def test_sub_list_stops_at_next_key(self):
        text = "---\ntags:\n  - one\naliases:\n  - other\n---\n"
        assert extract_metadata_tags(text) == {"#one"}

    def test_unquoted_flow_list(self):
        text = "---\ntags: [alpha, beta]\n---\n"
        assert extract_metadata_tags(text) == {"#alpha", "#beta"}

    def test_string_value(self):
        text = "---\ntags: alpha, beta\n---\n"
        assert extract_metadata_tags(text) == {"#alpha", "#beta"}

    def test_no_double_prefix(self):
        text = '---\ntags: ["#done"]\n---\n'
        assert extract_metadata_tags(text) == {"#done"}

    def test_malformed_yaml_does_not_raise(self):
        text = '---\ntags: ["a", "b"]\n  bad: : indentation: [\n---\n'
        assert extract_metadata_tags(text) == {"#a", "#b"}

    def test_block_without_tags(self):
        assert extract_metadata_tags("---\ntitle: x\n---\n") == set()

    def test_non_mapping_block(self):
        assert extract_metadata_tags("---\n- just\n- a list\n---\n") == set()

    def test_windows_line_endings(self):
        text = "---\r\ntags: [\"a\"]\r\n---\r\nbody"
        assert extract_metadata_tags(text) == {"#a"}


# ---------------------------------------------------------------------------
# Combined
# ---------------------------------------------------------------------------


class TestCombined:
    def test_inline_and_metadata_merge(self):
        text = '---\ntags: ["project"]\n---\nWorking on #project and #ideas'
        assert extract_tags(text) == {"#project", "#ideas"}

    def test_idempotent(self):
        text = '---\ntags:\n  - a\n---\n#b text #c'
        assert extract_tags(text) == extract_tags(text)

    def test_order_insensitive(self):
        first = extract_tags("#x then #y")
        second = extract_tags("#y then #x")
        assert first == second == {"#x", "#y"}
