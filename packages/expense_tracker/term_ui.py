"""Tiny terminal UI helpers (prompt_toolkit-based).

Kept separate from the ledger so the interactive pieces are easy to test in
isolation with a pipe input and a dummy output.
"""

from __future__ import annotations

from collections.abc import Sequence

from prompt_toolkit import PromptSession
from prompt_toolkit.auto_suggest import AutoSuggest, Suggestion
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.styles import Style
from prompt_toolkit.validation import ValidationError, Validator

from .categories import Category, parse_category


class _PrefixSuggest(AutoSuggest):
    """Grey inline completion of the first category whose name starts with the input."""

    def __init__(self, names: Sequence[str]) -> None:
        self._names = list(names)

    def get_suggestion(self, buffer, document):
        remainder = _prefix_remainder(self._names, document.text)
        return Suggestion(remainder) if remainder else None


def _prefix_remainder(names: Sequence[str], text: str) -> str | None:
    if not text:
        return None
    lower = text.lower()
    for name in names:
        if name.lower() == lower:
            return None
    for name in names:
        if name.lower().startswith(lower):
            return name[len(text) :] or None
    return None


class _CategoryValidator(Validator):
    def __init__(self, allowed: Sequence[Category]) -> None:
        self._allowed = set(allowed)

    def validate(self, document) -> None:
        try:
            category = parse_category(document.text)
        except ValueError:
            raise ValidationError(message="Choose one of the listed categories") from None
        if category not in self._allowed:
            raise ValidationError(message="Choose one of the listed categories")


def select_category(
    categories: Sequence[Category] = tuple(Category),
    *,
    default: Category | None = None,
    message: str = "Category (Tab to complete, Enter to accept): ",
    session: PromptSession | None = None,
) -> Category:
    """Prompt for one of ``categories`` and return it.

    The buffer is pre-filled with ``default``'s label when given, so pressing
    Enter accepts it. Typing a prefix of a plain category name shows the rest
    as a grey suggestion; Tab or Enter applies it.
    """

    names = [c.value for c in categories]
    completer = WordCompleter(
        [c.label for c in categories] + names,
        ignore_case=True,
        match_middle=True,
        sentence=True,
    )

    kb = KeyBindings()

    def _apply_suggestion(event) -> bool:
        b = event.app.current_buffer
        s = getattr(b, "suggestion", None)
        remainder = getattr(s, "text", None) or _prefix_remainder(names, b.document.text)
        if remainder:
            b.insert_text(remainder)
            return True
        return False

    @kb.add("tab", eager=True)
    def _(event) -> None:  # pragma: no cover - integration path
        if _apply_suggestion(event):
            return
        b = event.app.current_buffer
        if b.complete_state is None:
            b.start_completion(select_first=True)
        else:
            b.complete_next()

    @kb.add("enter", eager=True)
    def _(event) -> None:  # pragma: no cover - integration path
        b = event.app.current_buffer
        cs = b.complete_state
        if cs is not None and cs.current_completion is not None:
            b.apply_completion(cs.current_completion)
        else:
            _apply_suggestion(event)
        b.validate_and_handle()

    if session is None:
        sess: PromptSession = PromptSession(key_bindings=kb)
    else:
        sess = PromptSession(
            input=getattr(session, "input", None),
            output=getattr(session, "output", None),
            key_bindings=kb,
        )

    result = sess.prompt(
        message,
        default=default.label if default is not None else "",
        completer=completer,
        auto_suggest=_PrefixSuggest(names),
        validator=_CategoryValidator(categories),
        validate_while_typing=False,
        style=Style.from_dict({"auto-suggestion": "fg:#888888"}),
    )
    return parse_category(result)


__all__ = ["select_category"]
