"""Tests for context template rendering."""

from tavern_engine.services.template_engine import apply_template


class TestApplyTemplate:
    """Placeholder substitution."""

    def test_basic_replacement(self):
        assert apply_template("{{char}} greets {{user}}", {"char": "Nova", "user": "Sam"}) == "Nova greets Sam"

    def test_whitespace_inside_braces(self):
        assert apply_template("{{ char }} and {{  user}}", {"char": "Nova", "user": "Sam"}) == "Nova and Sam"

    def test_unknown_placeholder_renders_empty(self):
        assert apply_template("Hello {{nobody}}!", {}) == "Hello !"

    def test_multiple_occurrences(self):
        assert apply_template("{{char}}, {{char}}", {"char": "Nova"}) == "Nova, Nova"

    def test_non_identifier_left_alone(self):
        assert apply_template("{{random::a::b}}", {"random": "x"}) == "{{random::a::b}}"

    def test_replacement_not_reprocessed(self):
        """Values containing placeholders are inserted literally."""
        assert apply_template("{{description}}", {"description": "{{user}}", "user": "Sam"}) == "{{user}}"

    def test_empty_template(self):
        assert apply_template("", {"char": "Nova"}) == ""
        assert apply_template(None, {"char": "Nova"}) == ""

