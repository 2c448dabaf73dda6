import pytest

from codebrief.errors import ToolError
from codebrief.tools import TRUNCATION_MARKER, make_shell_tool, run_readonly_command, validate_command


@pytest.mark.parametrize(
	"command",
	[
		"",
		"   ",
		"rm -rf pkg",
		"python -c 'print(1)'",
		"ls; rm README.md",
		"cat README.md | wc -l",
		"cat README.md > copy.md",
		"echo $HOME",
		"cat ../secret",
		"cat /etc/passwd",
		"grep --file=/etc/passwd x",
		"grep -f/etc/passwd README.md",
		"grep -rnf/etc/passwd x",
		"grep -f../secret x",
		"head -n5 /etc/passwd",
		"tail -n5 -- ../secret",
		"ls -I/tmp .",
		"find . -exec rm {} +",
		"find . -delete",
		"cat 'unterminated",
	],
)
def test_validate_command_refuses(repo, command):
	with pytest.raises(ToolError):
		validate_command(command, str(repo))


def test_validate_command_allows_relative_paths(repo):
	assert validate_command("grep -rn --include=*.py TODO pkg", str(repo)) == [
		"grep",
		"-rn",
		"--include=*.py",
		"TODO",
		"pkg",
	]
	assert validate_command("ls pkg/../web", str(repo)) == ["ls", "pkg/../web"]


def test_validate_command_checks_attached_option_values(repo):
	assert validate_command("grep -m5 -eTODO README.md", str(repo)) == ["grep", "-m5", "-eTODO", "README.md"]
	assert validate_command("head -n5 README.md", str(repo)) == ["head", "-n5", "README.md"]
	assert validate_command("grep -fpkg/store.py README.md", str(repo))[1] == "-fpkg/store.py"
	with pytest.raises(ToolError, match="escapes"):
		validate_command("grep -o -f/etc/passwd README.md", str(repo))


def test_run_readonly_command(repo):
	assert "store.py" in run_readonly_command("ls pkg", str(repo))
	assert run_readonly_command("grep -n TODO README.md", str(repo)) == "2:TODO: write docs\n"


def test_run_readonly_command_reports_exit_status(repo):
	out = run_readonly_command("cat missing.txt", str(repo))
	assert out.startswith("exit 1:")
	assert "missing.txt" in out


def test_run_readonly_command_truncates(repo):
	out = run_readonly_command("cat README.md", str(repo), max_output=20)
	assert out == "# demo\nT" + TRUNCATION_MARKER
	assert len(out) == 20
	# too small for the marker
	assert run_readonly_command("cat README.md", str(repo), max_output=5) == "# dem"


def test_run_readonly_command_timeout(repo):
	with pytest.raises(ToolError, match="timed out"):
		run_readonly_command("tail -f README.md", str(repo), timeout=0.1)


def test_shell_tool_returns_errors_as_text(repo):
	shell = make_shell_tool(str(repo))
	assert shell.tool_name == "shell"
	assert shell("cat README.md").startswith("# demo")
	assert shell("rm README.md").startswith("Error: ")
	assert (repo / "README.md").exists()
