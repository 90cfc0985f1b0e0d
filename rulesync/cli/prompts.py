"""Interactive decision providers for the install command."""

from rich.prompt import Confirm, Prompt

from rulesync.models import AliasPair
from rulesync.utils.rich_console import get_console

ASK = "ask"


def ask_choice(prompt: str, options: list[str]) -> str | None:
    """Ask the user to pick one of ``options``. Returns None when input is closed."""
    try:
        return Prompt.ask(prompt, choices=options, console=get_console())
    except EOFError:
        return None


def fixed_choice(answer: str):
    """A decision provider that always gives the same answer."""

    def choose(prompt: str, options: list[str]) -> str | None:
        return answer if answer in options else None

    return choose


def make_decision_provider(policy: str):
    if policy == ASK:
        return ask_choice
    return fixed_choice(policy)


def confirm_alias_cleanup(pair: AliasPair) -> bool:
    """Ask whether to remove the old file of an alias pair."""
    try:
        return Confirm.ask(
            f"{pair.old} duplicates the incoming {pair.new}. Remove {pair.old}?",
            default=False,
            console=get_console(),
        )
    except EOFError:
        return False


def make_alias_approver(clean_aliases: bool | None):
    if clean_aliases is None:
        return confirm_alias_cleanup
    return lambda pair: clean_aliases
