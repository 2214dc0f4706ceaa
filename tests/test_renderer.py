import pytest

from branchguard.renderer import RenderError, is_template, render_policy_text, template_format_suffix


def test_template_format_suffix():
    assert template_format_suffix("protection.json") == ".json"
    assert template_format_suffix("protection.YAML") == ".yaml"
    assert template_format_suffix("protection.yml.j2") == ".yml"
    assert template_format_suffix("protection.j2") == ""


def test_is_template():
    assert is_template("a/protection.json.j2")
    assert not is_template("a/protection.json")


def test_render_keeps_trailing_newline():
    assert render_policy_text("{{ x }}\n", {"x": "y"}) == "y\n"


def test_render_syntax_error():
    with pytest.raises(RenderError, match="protection.json.j2"):
        render_policy_text("{% if %}", {}, name="protection.json.j2")
