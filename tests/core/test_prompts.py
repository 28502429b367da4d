"""Tests for prompt templates and helpers."""

from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from researchly.application.prompts import (
    DIRECT_CHAT_PROMPT,
    chat_system_instruction,
    define_context_section,
    to_history,
)
from researchly.models.session import ChatMessage


class TestToHistory:
    def test_roles_map_in_order(self) -> None:
        history = to_history([
            ChatMessage(role="user", content="q1"),
            ChatMessage(role="assistant", content="a1"),
            ChatMessage(role="user", content="q2"),
        ])

        assert [type(m) for m in history] == [HumanMessage, AIMessage, HumanMessage]
        assert [m.content for m in history] == ["q1", "a1", "q2"]


class TestDefineContextSection:
    def test_empty_when_nothing_known(self) -> None:
        assert define_context_section(None, []) == ""

    def test_surrounding_only(self) -> None:
        assert define_context_section("near the term", []) == 'Surrounding context from the paper:\n"near the term"'

    def test_passages_only(self) -> None:
        section = define_context_section(None, ["p1", "p2"])

        assert section == "Relevant sections from the paper:\np1\n\np2"

    def test_both(self) -> None:
        section = define_context_section("near", ["p1"])

        assert section.startswith("Surrounding context")
        assert section.endswith("Relevant sections from the paper:\np1")


class TestChatPrompts:
    def test_direct_prompt_embeds_document_before_history(self) -> None:
        messages = DIRECT_CHAT_PROMPT.format_messages(
            paper_title="T",
            document_text="FULL TEXT",
            history=[HumanMessage(content="earlier"), AIMessage(content="reply")],
            question="now?",
        )

        assert isinstance(messages[0], SystemMessage)
        assert "Paper Title: T" in messages[0].content
        assert "FULL TEXT" in messages[0].content
        assert [m.content for m in messages[1:]] == ["earlier", "reply", "now?"]

    def test_system_instruction_names_paper(self) -> None:
        assert chat_system_instruction("Attention").endswith("Paper Title: Attention")

    def test_braces_in_question_are_not_template_fields(self) -> None:
        messages = DIRECT_CHAT_PROMPT.format_messages(
            paper_title="T", document_text="x", history=[], question="what is {k}?"
        )

        assert messages[-1].content == "what is {k}?"
