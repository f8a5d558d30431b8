"""Tests for the rewrite operation across modes."""

import pytest

from conftest import ENV_CHECK
from propstrip import ConfigurationError, Mode, RewriteStatus, normalize_options, rewrite
from propstrip.models import SiteKind
from propstrip.parser import parse_source

FUNCTION_FOO = "function Foo() { return <div />; }\n"


def _rewrite(source, file_id="test.jsx", **kwargs):
    return rewrite(source, file_id, normalize_options(**kwargs))


class TestRemoveMode:
    def test_static_field_removed(self):
        source = "class Foo extends React.Component { static propTypes = { bar: T } }"
        result = _rewrite(source, mode="remove")

        assert result.changed
        assert result.code == "class Foo extends React.Component {  }"

    def test_static_field_semicolon_removed(self):
        source = (
            "class Foo extends React.Component {\n"
            "  static propTypes = { bar: T };\n"
            "  render() { return <div />; }\n"
            "}\n"
        )
        result = _rewrite(source)

        assert result.code == (
            "class Foo extends React.Component {\n"
            "  \n"
            "  render() { return <div />; }\n"
            "}\n"
        )

    def test_static_field_of_any_class_removed(self):
        source = "class Store { static propTypes = {}; }\n"
        result = _rewrite(source)

        assert result.code == "class Store {  }\n"

    def test_instance_field_kept(self):
        source = "class Foo extends React.Component { propTypes = {}; }\n"
        assert _rewrite(source).status is RewriteStatus.UNCHANGED

    def test_assignment_statements_removed(self, sample_component_code):
        result = _rewrite(sample_component_code)

        expected = sample_component_code.replace(
            "Card.propTypes = {\n  title: PropTypes.string,\n};", ""
        ).replace(
            "Avatar.propTypes = {\n  url: PropTypes.string.isRequired,\n};", ""
        )
        assert result.code == expected
        assert [site.component_name for site in result.sites] == ["Card", "Avatar"]
        assert all(site.kind is SiteKind.ASSIGNMENT for site in result.sites)

    def test_non_component_assignment_untouched(self):
        source = "const store = {};\nstore.propTypes = { a: 1 };\n"
        result = _rewrite(source)

        assert result.status is RewriteStatus.UNCHANGED
        assert result.code is None

    def test_annotation_overrides_registry(self):
        source = "Foo.propTypes /* remove-proptypes */ = {bar: T};\n"
        result = _rewrite(source)

        assert result.code == "\n"
        assert result.sites[0].annotated
        assert not result.sites[0].is_component

    def test_custom_annotation_marker(self):
        source = "Foo.propTypes /* strip */ = {};\n"
        assert _rewrite(source).status is RewriteStatus.UNCHANGED
        assert _rewrite(source, annotation="strip").code == "\n"

    def test_assignment_inside_conditional_becomes_void(self):
        source = FUNCTION_FOO + f"{ENV_CHECK} ? Foo.propTypes = {{}} : void 0;\n"
        result = _rewrite(source)

        assert result.code == FUNCTION_FOO + f"{ENV_CHECK} ? void 0 : void 0;\n"

    def test_chained_assignment_yields_one_edit(self):
        source = "const A = () => <a />;\nconst B = () => <b />;\nA.propTypes = B.propTypes = {};\n"
        result = _rewrite(source)

        assert result.code == "const A = () => <a />;\nconst B = () => <b />;\n\n"

    def test_computed_member_is_not_a_site(self):
        source = FUNCTION_FOO + 'Foo["propTypes"] = {};\n'
        assert _rewrite(source).status is RewriteStatus.UNCHANGED

    def test_custom_property_name(self):
        source = FUNCTION_FOO + "Foo.defaultProps = {};\nFoo.propTypes = {};\n"
        result = _rewrite(source, property_name="defaultProps")

        assert result.code == FUNCTION_FOO + "\nFoo.propTypes = {};\n"

    def test_idempotent(self, sample_component_code):
        first = _rewrite(sample_component_code)
        second = _rewrite(first.code)

        assert first.changed
        assert second.status is RewriteStatus.UNCHANGED


class TestWrapMode:
    def test_assignment_wrapped(self):
        source = FUNCTION_FOO + "Foo.propTypes = {bar: T}; export default Foo;"
        result = _rewrite(source, mode="wrap")

        assert result.code == FUNCTION_FOO + (
            f"Foo.propTypes = {ENV_CHECK} ? {{bar: T}} : {{}}; export default Foo;"
        )

    def test_static_field_hoisted(self):
        source = "class Foo extends React.Component {\n  static propTypes = { bar: T };\n}\n"
        result = _rewrite(source, mode=Mode.WRAP)

        assert result.code == (
            "class Foo extends React.Component {\n  \n}\n"
            f"Foo.propTypes = {ENV_CHECK} ? {{ bar: T }} : {{}};\n"
        )

    def test_static_field_in_anonymous_class_skipped(self):
        source = "export default class extends React.Component {\n  static propTypes = {};\n}\n"
        assert _rewrite(source, mode="wrap").status is RewriteStatus.UNCHANGED
        assert _rewrite(source, mode="remove").code == (
            "export default class extends React.Component {\n  \n}\n"
        )

    def test_annotated_assignment_wrapped(self):
        source = "Foo.propTypes /* remove-proptypes */ = {};\n"
        result = _rewrite(source, mode="wrap")

        assert result.code == f"Foo.propTypes = {ENV_CHECK} ? {{}} : {{}};\n"

    def test_custom_env_check(self):
        source = FUNCTION_FOO + "Foo.propTypes = {};\n"
        result = _rewrite(source, mode="wrap", env_check="__DEV__")

        assert result.code == FUNCTION_FOO + "Foo.propTypes = __DEV__ ? {} : {};\n"

    def test_chained_assignment_keeps_inner_text(self):
        source = "const A = () => <a />;\nconst B = () => <b />;\nA.propTypes = B.propTypes = {};\n"
        result = _rewrite(source, mode="wrap")

        assert result.code.endswith(f"A.propTypes = {ENV_CHECK} ? B.propTypes = {{}} : {{}};\n")

    def test_wrap_then_remove(self):
        source = FUNCTION_FOO + "Foo.propTypes = {};\n"
        wrapped = _rewrite(source, mode="wrap")
        removed = _rewrite(wrapped.code, mode="remove")

        assert removed.code == FUNCTION_FOO + "\n"


class TestUnsafeWrapMode:
    def test_assignment_wrapped(self):
        source = FUNCTION_FOO + "Foo.propTypes = {bar: T};\n"
        result = _rewrite(source, mode="unsafe-wrap")

        assert result.code == FUNCTION_FOO + f"{ENV_CHECK} ? (Foo.propTypes = {{bar: T}}) : void 0;\n"

    def test_static_field_hoisted(self):
        source = "class Foo extends Component {\n  static propTypes = { bar: T };\n}\n"
        result = _rewrite(source, mode="unsafe-wrap")

        assert result.code == (
            "class Foo extends Component {\n  \n}\n"
            f"{ENV_CHECK} ? Foo.propTypes = {{ bar: T }} : void 0;\n"
        )

    def test_rewrap_collapses(self):
        source = FUNCTION_FOO + "Foo.propTypes = {};\n"
        once = _rewrite(source, mode="unsafe-wrap")
        twice = _rewrite(once.code, mode="unsafe-wrap")

        assert twice.code == FUNCTION_FOO + f"{ENV_CHECK} ? void 0 : void 0;\n"

    def test_then_remove(self):
        source = FUNCTION_FOO + "Foo.propTypes = {};\n"
        wrapped = _rewrite(source, mode="unsafe-wrap")
        removed = _rewrite(wrapped.code, mode="remove")

        assert removed.code == FUNCTION_FOO + f"{ENV_CHECK} ? void 0 : void 0;\n"


class TestParenthesizedAssignments:
    GUARDED = FUNCTION_FOO + f"{ENV_CHECK} ? (Foo.propTypes = {{}}) : void 0;\n"
    STATEMENT = FUNCTION_FOO + "(Foo.propTypes = {});\n"

    @staticmethod
    def _assert_parses(code):
        assert parse_source(code.encode("utf-8"), "out.jsx") is not None

    @pytest.mark.parametrize("mode", ["remove", "unsafe-wrap"])
    def test_guarded_assignment_becomes_void(self, mode):
        result = _rewrite(self.GUARDED, mode=mode)

        assert result.code == FUNCTION_FOO + f"{ENV_CHECK} ? void 0 : void 0;\n"
        self._assert_parses(result.code)

    def test_parenthesized_statement_removed(self):
        result = _rewrite(self.STATEMENT)

        assert result.code == FUNCTION_FOO + "\n"
        self._assert_parses(result.code)

    def test_parenthesized_statement_unsafe_wrapped(self):
        result = _rewrite(self.STATEMENT, mode="unsafe-wrap")

        assert result.code == FUNCTION_FOO + f"{ENV_CHECK} ? (Foo.propTypes = {{}}) : void 0;\n"
        self._assert_parses(result.code)

    def test_doubly_parenthesized(self):
        source = FUNCTION_FOO + f"{ENV_CHECK} ? ((Foo.propTypes = {{}})) : void 0;\n"
        result = _rewrite(source)

        assert result.code == FUNCTION_FOO + f"{ENV_CHECK} ? void 0 : void 0;\n"

    def test_wrap_keeps_parentheses(self):
        result = _rewrite(self.STATEMENT, mode="wrap")

        assert result.code == FUNCTION_FOO + f"(Foo.propTypes = {ENV_CHECK} ? {{}} : {{}});\n"
        self._assert_parses(result.code)

    def test_unsafe_wrap_output_reprocesses(self):
        source = FUNCTION_FOO + "Foo.propTypes = {};\n"
        wrapped = _rewrite(source, mode="unsafe-wrap")

        self._assert_parses(wrapped.code)
        assert _rewrite(wrapped.code, mode="remove").code == self.GUARDED.replace(
            "(Foo.propTypes = {})", "void 0"
        )


class TestConfigurationGuard:
    @pytest.mark.parametrize("mode", ["wrap", "unsafe-wrap"])
    @pytest.mark.parametrize("source", ["", "%%% not javascript", FUNCTION_FOO])
    def test_remove_import_requires_remove_mode(self, mode, source):
        with pytest.raises(ConfigurationError, match=r"removeImport.*mode.*remove"):
            _rewrite(source, mode=mode, remove_import=True)

    def test_unknown_mode(self):
        with pytest.raises(ConfigurationError):
            normalize_options(mode="strip")


class TestResults:
    def test_parse_failure_is_not_fatal(self):
        result = _rewrite("function (")

        assert result.status is RewriteStatus.PARSE_FAILED
        assert result.code is None
        assert not result.changed

    def test_no_sites_is_unchanged(self):
        assert _rewrite("export const answer = 42;\n").status is RewriteStatus.UNCHANGED

    def test_empty_source(self):
        assert _rewrite("").status is RewriteStatus.UNCHANGED

    def test_position_map(self):
        source = FUNCTION_FOO + "Foo.propTypes = {};\nexport default Foo;\n"
        result = _rewrite(source)

        out_offset = result.code.index("export")
        assert result.position_map.original_offset(out_offset) == source.index("export")

    def test_source_map(self):
        source = FUNCTION_FOO + "Foo.propTypes = {};\nexport default Foo;\n"
        result = _rewrite(source)
        source_map = result.source_map(source)

        assert source_map["version"] == 3
        assert source_map["sources"] == ["test.jsx"]
        assert source_map["sourcesContent"] == [source]
        assert source_map["mappings"].count(";") == result.code.count("\n")
        assert source_map["mappings"].startswith("AAAA")

    def test_non_ascii_offsets(self):
        source = 'const Hi = () => <p>héllo wörld</p>;\nHi.propTypes = {};\nexport default Hi;\n'
        result = _rewrite(source)

        assert result.code == 'const Hi = () => <p>héllo wörld</p>;\n\nexport default Hi;\n'


class TestTypeScript:
    def test_tsx_class_component(self):
        source = (
            "class Foo extends React.Component<Props> {\n"
            "  static propTypes = { a: PropTypes.string };\n"
            "  render() { return <div />; }\n"
            "}\n"
        )
        result = _rewrite(source, file_id="Foo.tsx")

        assert result.changed
        assert "propTypes" not in result.code
        assert "render() { return <div />; }" in result.code

    def test_tsx_function_component(self):
        source = "const Foo: React.FC<Props> = ({ a }) => <div>{a}</div>;\nFoo.propTypes = {};\n"
        result = _rewrite(source, file_id="Foo.tsx")

        assert result.code == "const Foo: React.FC<Props> = ({ a }) => <div>{a}</div>;\n\n"
