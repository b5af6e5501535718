"""Tests for the static well-formedness checker."""

from __future__ import annotations

from junitbridge.core.validator.syntax import validate_syntax


class TestValidateSyntax:
    """Static well-formedness checks."""

    def test_valid_source(self, login_java):
        """A complete class is valid with no warnings."""
        report = validate_syntax(login_java)
        assert report.valid is True
        assert report.test_count == 3
        assert report.errors == []
        assert report.warnings == []

    def test_injected_unbalanced_brace(self, login_java):
        """An extra brace is an error."""
        broken = login_java.replace("void setUp() {", "void setUp() { {", 1)
        report = validate_syntax(broken)
        assert report.valid is False
        assert any("Unbalanced braces" in e for e in report.errors)

    def test_stray_closing_brace(self, login_java):
        """A stray close is an error."""
        report = validate_syntax("}\n" + login_java + "{")
        assert report.valid is False
        assert any("without matching" in e for e in report.errors)

    def test_missing_teardown_with_three_tests(self, login_java):
        """A missing @AfterEach is an error; three tests is enough."""
        code = login_java.replace("@AfterEach\n", "").replace(
            "import org.junit.jupiter.api.AfterEach;\n", ""
        )
        report = validate_syntax(code)
        assert report.valid is False
        assert report.test_count == 3
        assert any("@AfterEach" in e for e in report.errors)
        assert not any("@Test count" in w for w in report.warnings)

    def test_few_tests_is_only_a_warning(self):
        """Too few tests only warns."""
        code = """
        import org.junit.jupiter.api.Test;
        import org.openqa.selenium.WebDriver;
        import org.openqa.selenium.support.ui.WebDriverWait;
        public class OneTest {
            WebDriver driver;
            @BeforeEach void setUp() {}
            @AfterEach void tearDown() {}
            @Test void one() { driver.get("http://x"); }
        }
        """
        report = validate_syntax(code)
        assert report.valid is True
        assert report.test_count == 1
        assert "@Test count is 1 (expected >= 3)" in report.warnings

    def test_missing_declarations(self):
        """Each missing declaration is reported."""
        report = validate_syntax("class Foo { }")
        assert report.valid is False
        assert report.test_count == 0
        joined = "\n".join(report.errors)
        for expected in (
            "public class",
            "org.junit.jupiter.api.Test",
            "No @Test methods",
            "@BeforeEach",
            "@AfterEach",
            "WebDriver",
        ):
            assert expected in joined

    def test_quality_warnings(self, login_java):
        """Sleep, dummy asserts and missing waits warn."""
        code = login_java.replace(
            'driver.get("http://localhost:8080/login");',
            'driver.get("http://localhost:8080/login"); Thread.sleep(1000); assertTrue(true);',
        ).replace("WebDriverWait", "FluentWait")
        report = validate_syntax(code)
        assert report.valid is True
        assert any("Thread.sleep" in w for w in report.warnings)
        assert any("assertTrue(true)" in w for w in report.warnings)
        assert any("WebDriverWait not found" in w for w in report.warnings)

    def test_empty_test_body_warning(self, login_java):
        """Empty test bodies warn."""
        code = login_java.replace(
            "    @AfterEach",
            "    @Test\n    public void testTodo() {\n        // later\n    }\n\n    @AfterEach",
        )
        report = validate_syntax(code)
        assert report.test_count == 4
        assert "1 empty @Test method(s) found" in report.warnings

    def test_commented_code_does_not_count(self, login_java):
        """Commented code is ignored."""
        code = login_java + "\n// @Test Thread.sleep(5);\n"
        report = validate_syntax(code)
        assert report.test_count == 3
        assert not any("Thread.sleep" in w for w in report.warnings)

    def test_unterminated_comment_is_an_error(self, login_java):
        """An open comment at EOF is an error."""
        report = validate_syntax(login_java + "\n/* dangling")
        assert report.valid is False
        assert any("block comment" in e for e in report.errors)

    def test_unterminated_string_mid_file_is_an_error(self, login_java):
        """A string cut off by a newline is reported with its line number."""
        code = login_java.replace(
            'String marker = "not a brace: { or }";', 'String marker = "not a brace;'
        )
        line = code[: code.index("String marker")].count("\n") + 1
        report = validate_syntax(code)
        assert report.valid is False
        assert f"Unterminated string literal at line {line}" in report.errors

    def test_unterminated_char_mid_file_is_an_error(self, login_java):
        """An unclosed char literal is reported the same way."""
        code = login_java.replace("int count = ", "char c = 'x;\n        int count = ")
        report = validate_syntax(code)
        assert report.valid is False
        assert any(e.startswith("Unterminated char literal at line") for e in report.errors)

    def test_to_dict_shape(self, login_java):
        """The report serializes with the wire keys."""
        assert set(validate_syntax(login_java).to_dict()) == {
            "valid",
            "testCount",
            "errors",
            "warnings",
        }
