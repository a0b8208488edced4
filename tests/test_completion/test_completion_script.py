import pytest

from skein.completion import completion_script
from skein.exceptions import UnsupportedShellError


def test_bash_script():
    script = completion_script("bash", "tasks")
    assert "_tasks_completion()" in script
    assert 'tasks __complete "$request"' in script
    assert "complete -F _tasks_completion tasks" in script


def test_zsh_script():
    script = completion_script("zsh", "tasks")
    assert "#compdef tasks" in script
    assert "compdef _tasks_completion tasks" in script


def test_fish_script():
    script = completion_script("fish", "tasks")
    assert "function __tasks_complete" in script
    assert 'complete -c tasks -a "(__tasks_complete)" -f' in script


def test_shell_name_is_case_insensitive():
    assert completion_script("BASH", "tasks") == completion_script("bash", "tasks")


def test_program_name_is_sanitized_for_function_names():
    script = completion_script("bash", "my-tool")
    assert "_my_tool_completion()" in script
    assert "complete -F _my_tool_completion my-tool" in script


def test_unsupported_shell():
    with pytest.raises(UnsupportedShellError) as exc_info:
        completion_script("powershell", "tasks")
    assert exc_info.value.shell == "powershell"
