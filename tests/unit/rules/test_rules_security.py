"""Tests for the security rule family."""

import pytest

from code_hints.locator import build_unit
from code_hints.models import CodeUnit, IssueCategory, Severity
from code_hints.rules import SECURITY, RuleRegistry, SecurityRules
from code_hints.rules.lexicon import JAVA


def evaluate(unit):
    return RuleRegistry.evaluate(SECURITY, unit)


class TestSqlInjection:
    def test_java_concatenated_query(self, java_unit):
        unit = java_unit("""public List<User> findUsers(String name) {
    String query = "SELECT * FROM users WHERE name = '" + name + "'";
    return jdbcTemplate.query(query, mapper);
}""")
        issue = evaluate(unit)

        assert issue.category is IssueCategory.SQL_INJECTION
        assert issue.severity is Severity.CRITICAL
        assert issue.message == "SQL Injection - Use PreparedStatement instead of string concatenation"

    def test_keyword_outside_literals_is_ignored(self, java_unit):
        unit = java_unit("""public void remove(String id) {
    // delete the entry
    cache.remove("entry-" + id);
}""")
        assert evaluate(unit) is None

    def test_kotlin_interpolated_query(self, kotlin_unit):
        unit = kotlin_unit("""fun findUser(id: String): User? {
    val sql = "SELECT * FROM users WHERE id = '${id}'"
    return jdbc.queryForObject(sql, mapper)
}""")
        assert evaluate(unit).message == "SQL Injection - Use parameterized queries or exposed/jooq DSL"

    def test_python_fstring_query(self, python_unit):
        unit = python_unit('''def find_user(cursor, name):
    cursor.execute(f"SELECT * FROM users WHERE name = '{name}'")
''')
        assert evaluate(unit).category is IssueCategory.SQL_INJECTION


class TestHardcodedCredentials:
    def test_java_field(self, java_unit):
        unit = java_unit('private String apiKey = "sk-abc123";')
        issue = evaluate(unit)

        assert issue.category is IssueCategory.HARDCODED_CREDENTIALS
        assert issue.severity is Severity.CRITICAL
        assert issue.message == "Hardcoded credential - Use environment variables or secure vault"

    def test_python_module_constant(self, python_unit):
        unit = python_unit('DB_PASSWORD = "hunter2"\n')
        assert evaluate(unit).category is IssueCategory.HARDCODED_CREDENTIALS

    def test_empty_literal_is_not_a_credential(self, python_unit):
        unit = python_unit('password = ""\n')
        assert evaluate(unit) is None

    def test_value_from_environment_is_not_a_credential(self, python_unit):
        unit = python_unit('''def connect():
    password = os.environ["DB_PASSWORD"]
    return password
''')
        assert evaluate(unit) is None

    def test_kotlin_text_mode(self, kotlin_unit):
        unit = kotlin_unit('val apiToken = "abc123"')
        assert evaluate(unit).category is IssueCategory.HARDCODED_CREDENTIALS

    def test_typescript_annotated_const(self):
        unit = build_unit('const apiKey: string = "sk-test-999";', "typescript")
        assert evaluate(unit).category is IssueCategory.HARDCODED_CREDENTIALS

    def test_comparison_is_not_an_assignment(self, kotlin_unit):
        unit = kotlin_unit('fun isAdmin(token: String) = token == "root"')
        assert evaluate(unit) is None


class TestPathTraversal:
    def test_python_open_with_concatenation(self, python_unit):
        unit = python_unit('''def read_report(name):
    with open("/srv/reports/" + name) as fh:
        return fh.read()
''')
        issue = evaluate(unit)

        assert issue.category is IssueCategory.PATH_TRAVERSAL
        assert issue.severity is Severity.HIGH

    def test_python_validated_path(self, python_unit):
        unit = python_unit('''def read_report(name):
    path = os.path.realpath("/srv/reports/" + name)
    if not path.startswith("/srv/reports/"):
        raise ValueError(name)
    with open(path) as fh:
        return fh.read()
''')
        assert evaluate(unit) is None


class TestInsecureRandom:
    def test_python_random_token(self, python_unit):
        unit = python_unit('''def make_token():
    return "".join(random.choice(ALPHABET) for _ in range(32))
''')
        issue = evaluate(unit)

        assert issue.category is IssueCategory.INSECURE_RANDOM
        assert issue.message == "Insecure Random - Use the secrets module for tokens and keys"

    def test_random_outside_security_context(self, python_unit):
        unit = python_unit('''def roll():
    return random.randint(1, 6)
''')
        assert evaluate(unit) is None


class TestCommandInjection:
    def test_python_os_system(self, python_unit):
        unit = python_unit('''def archive(name):
    os.system("tar czf " + name + ".tgz data/")
''')
        issue = evaluate(unit)

        assert issue.category is IssueCategory.COMMAND_INJECTION
        assert issue.severity is Severity.CRITICAL

    def test_java_runtime_exec(self, java_unit):
        unit = java_unit("""public void ping(String host) throws IOException {
    Runtime.getRuntime().exec("ping -c 1 " + host);
}""")
        assert evaluate(unit).category is IssueCategory.COMMAND_INJECTION

    def test_javascript_child_process(self):
        unit = build_unit("""function archive(name) {
  child_process.exec("tar czf " + name + ".tgz data/");
}""", "javascript")
        assert evaluate(unit).category is IssueCategory.COMMAND_INJECTION

    def test_javascript_regex_exec_is_not_a_command(self):
        unit = build_unit(
            r"function parseId(s){ const m = /id=(\d+)/.exec(s); return Number(m[1]) + 1; }", "javascript"
        )
        assert evaluate(unit) is None


class TestXss:
    def test_javascript_unescaped_response(self):
        unit = build_unit("""function greet(req, res) {
  res.send("<h1>Hello " + req.query.name + "</h1>");
}""", "javascript")
        issue = evaluate(unit)

        assert issue.category is IssueCategory.XSS
        assert issue.severity is Severity.HIGH
        assert issue.message == "XSS vulnerability - Escape HTML output"

    def test_javascript_escaped_response(self):
        unit = build_unit("""function greet(req, res) {
  res.send("<h1>Hello " + escape(req.query.name) + "</h1>");
}""", "javascript")
        assert evaluate(unit) is None


class TestSizeGuard:
    SOURCE = 'val apiToken = "abc123"\n'

    def _padded(self, size):
        padding = size - len(self.SOURCE) - 2
        return CodeUnit(id="kotlin:apiToken", language="kotlin", source_text=self.SOURCE + "//" + "x" * padding)

    def test_unit_at_limit_is_evaluated(self):
        assert evaluate(self._padded(10_000)).category is IssueCategory.HARDCODED_CREDENTIALS

    def test_unit_over_limit_is_skipped(self):
        unit = self._padded(10_001)

        assert unit.size == 10_001
        assert evaluate(unit) is None


class TestSecurityRuleFamily:
    def test_rule_order(self):
        engine = SecurityRules(JAVA).engine()
        assert engine.rule_names == [
            "sql_injection",
            "hardcoded_credentials",
            "path_traversal",
            "insecure_random",
            "command_injection",
            "xss",
        ]

    def test_text_literals_are_scanned_without_tree(self):
        unit = CodeUnit(id="kotlin:q", language="kotlin", source_text='val q = "a" + "b \\"c\\""')
        assert list(SecurityRules.string_literals(unit)) == ["a", 'b \\"c\\"']

    def test_structured_declarations(self, java_unit):
        unit = java_unit("""void setup() {
    String user = "admin";
    String secret = "s3cr3t";
    int retries = 3;
}""")
        assert list(SecurityRules.literal_declarations(unit)) == [("user", "admin"), ("secret", "s3cr3t")]

    @pytest.mark.parametrize("language", ["ruby", "rust"])
    def test_unregistered_language(self, language):
        unit = CodeUnit(id=f"{language}:f", language=language, source_text='password = "hunter2"')
        assert evaluate(unit) is None
