import pytest

from aliasguard.grammar import AliasGrammar
from aliasguard.models import AliasDefinition, ShellDialect, UNPARSED


class TestValidateName:
    @pytest.mark.parametrize("name", ["ll", "git_log", "g123", "_start", "9lives", "git-log", "a" * 255])
    def test_valid(self, name):
        assert AliasGrammar.validate_name(name)

    @pytest.mark.parametrize("name", [
        "", "with space", "alias.ll", "ll\n", "-dash", "semi;colon", "quote'", "a" * 256, "tab\tname",
    ])
    def test_invalid(self, name):
        assert not AliasGrammar.validate_name(name)


class TestValidateCommand:
    def test_valid(self):
        assert AliasGrammar.validate_command("ls -la")
        assert AliasGrammar.validate_command('echo "Hello"')
        assert AliasGrammar.validate_command("x" * 2048)

    def test_invalid(self):
        assert not AliasGrammar.validate_command("")
        assert not AliasGrammar.validate_command("x" * 2049)

    def test_validation_error_messages(self):
        assert AliasGrammar.validation_error(AliasDefinition("ll", "ls")) is None
        assert "Invalid alias name" in AliasGrammar.validation_error(AliasDefinition("l l", "ls"))
        assert "empty" in AliasGrammar.validation_error(AliasDefinition("ll", ""))
        assert "2048" in AliasGrammar.validation_error(AliasDefinition("ll", "x" * 3000))


class TestIsAliasLine:
    @pytest.mark.parametrize("line", ["alias ll='ls'", "  alias x='y'", "\talias x=y", "alias"])
    def test_recognized(self, line):
        assert AliasGrammar.is_alias_line(line)

    @pytest.mark.parametrize("line", [
        "# alias x='y'", "export X=1", "", "   ", "Alias x='y'", "aliases=1", "echo alias x=y",
    ])
    def test_not_recognized(self, line):
        assert not AliasGrammar.is_alias_line(line)


class TestParse:
    def test_single_quoted(self):
        parsed = AliasGrammar.parse("alias ll='ls -la'")
        assert parsed == AliasDefinition(name="ll", command="ls -la")

    def test_double_quoted_with_inner_single_quotes(self):
        parsed = AliasGrammar.parse("alias gcm=\"git commit -m 'initial commit'\"")
        assert parsed.name == "gcm"
        assert parsed.command == "git commit -m 'initial commit'"

    def test_spaces_around_equals(self):
        parsed = AliasGrammar.parse("  alias  gs = 'git status'")
        assert parsed == AliasDefinition(name="gs", command="git status")

    def test_unquoted_stops_at_comment(self):
        parsed = AliasGrammar.parse("alias ..=cd ..   # go up")
        assert parsed == AliasDefinition(name="..", command="cd ..")

    def test_unquoted_to_end_of_line(self):
        assert AliasGrammar.parse("alias k=kubectl").command == "kubectl"

    def test_unterminated_quote_runs_to_end(self):
        assert AliasGrammar.parse("alias x='echo hi").command == "echo hi"

    def test_trailing_backslash_escapes_closing_quote(self):
        # the quote after the backslash does not close the value
        assert AliasGrammar.parse("alias x='C:\\'").command == "C:'"

    def test_quoted_keeps_hash(self):
        assert AliasGrammar.parse("alias h='echo #tag'").command == "echo #tag"

    def test_text_after_closing_quote_ignored(self):
        assert AliasGrammar.parse("alias ll='ls -la' # listing").command == "ls -la"

    def test_command_is_unescaped(self):
        assert AliasGrammar.parse("alias h='echo \\$HOME'").command == "echo $HOME"

    def test_escaped_quote_does_not_close(self):
        line = 'alias q="say \\"it\\\'s\\""'
        assert AliasGrammar.parse(line).command == "say \"it's\""

    def test_empty_value_keeps_name(self):
        parsed = AliasGrammar.parse("alias x=")
        assert parsed.name == "x"
        assert parsed.command == ""

    @pytest.mark.parametrize("line", [
        "export X=1",
        "# alias x='y'",
        "alias ='ls'",
        "alias   = ls",
        "alias ll 'ls -la'",
        "alias",
    ])
    def test_unparsed(self, line):
        parsed = AliasGrammar.parse(line)
        assert parsed == UNPARSED
        assert not parsed.is_parsed


class TestRender:
    def test_bash_single_quotes(self, alias):
        assert AliasGrammar(ShellDialect.BASH).render(alias) == "alias ll='ls -la'"

    def test_zsh_matches_bash(self):
        alias = AliasDefinition(name="gst", command="git status")
        assert AliasGrammar(ShellDialect.ZSH).render(alias) == "alias gst='git status'"

    def test_double_quotes_when_command_has_single_quote(self):
        alias = AliasDefinition(name="gcm", command="git commit -m 'wip'")
        assert AliasGrammar(ShellDialect.BASH).render(alias) == "alias gcm=\"git commit -m \\'wip\\'\""

    def test_special_characters_escaped(self):
        alias = AliasDefinition(name="echo_test", command='echo "Hello $USER"')
        rendered = AliasGrammar(ShellDialect.BASH).render(alias)
        assert rendered == "alias echo_test='echo \\\"Hello \\$USER\\\"'"

    def test_fish(self, alias):
        assert AliasGrammar(ShellDialect.FISH).render(alias) == "alias ll 'ls -la'"

    def test_fish_always_single_quotes(self):
        alias = AliasDefinition(name="gcm", command="git commit -m 'wip'")
        assert AliasGrammar(ShellDialect.FISH).render(alias) == "alias gcm 'git commit -m \\'wip\\''"

    def test_unknown_behaves_like_bash(self):
        plain = AliasDefinition(name="ll", command="ls -la")
        quoted = AliasDefinition(name="gcm", command="git commit -m 'wip'")
        bash = AliasGrammar(ShellDialect.BASH)
        unknown = AliasGrammar(ShellDialect.UNKNOWN)
        assert unknown.render(plain) == bash.render(plain)
        assert unknown.render(quoted) == bash.render(quoted)

    @pytest.mark.parametrize("definition", [
        AliasDefinition(name="bad name", command="ls"),
        AliasDefinition(name="ll", command=""),
        AliasDefinition(name="ll", command="x" * 2049),
    ])
    def test_invalid_renders_empty(self, definition):
        assert AliasGrammar(ShellDialect.BASH).render(definition) == ""


@pytest.mark.parametrize("dialect", [ShellDialect.BASH, ShellDialect.ZSH])
@pytest.mark.parametrize("command", [
    "ls -la",
    "git commit -m 'initial commit'",
    'echo "Hello $USER"',
    "echo \"it's\" && echo 'ok'",
    "grep -rn '#todo' .",
    "cd ~/projects; ls *.py?",
    "printf 'a\\nb'",
    "echo trailing\\",
])
def test_render_parse_round_trip(dialect, command):
    alias = AliasDefinition(name="a-1_b", command=command)
    rendered = AliasGrammar(dialect).render(alias)
    assert AliasGrammar.is_alias_line(rendered)
    assert AliasGrammar.parse(rendered) == alias


def test_equality_ignores_informational_fields():
    first = AliasDefinition(name="ll", command="ls", description="one", enabled=False)
    second = AliasDefinition(name="ll", command="ls", description="two")
    assert first == second
