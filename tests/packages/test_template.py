"""
Tests for rendering package templates
"""

# Third Party
import pytest

# Local
from pkgop.exceptions import LoadError
from pkgop.packages import TemplateContext, render_template


def test_render_nested_keys():
    """Make sure dotted keys resolve into the nested context"""
    context = TemplateContext(
        package={"name": "pko", "namespace": "pko-system"},
        config={"nested": {"value": 3}},
        images={"manager": "img:v1"},
    )
    rendered = render_template(
        "${package.namespace}/${config.nested.value}/${images.manager}/$$HOME",
        context,
    )
    assert rendered == "pko-system/3/img:v1/$HOME"


def test_render_without_placeholders():
    """Make sure plain content passes through untouched"""
    assert render_template("plain: text\n", TemplateContext()) == "plain: text\n"


def test_render_unknown_key():
    """Make sure a missing key is a LoadError"""
    with pytest.raises(LoadError, match="unresolvable template key"):
        render_template("${images.missing}", TemplateContext(), path="x.yaml.tmpl")


def test_render_invalid_placeholder():
    """Make sure a malformed placeholder is a LoadError"""
    with pytest.raises(LoadError, match="invalid template"):
        render_template("${not closed", TemplateContext())
