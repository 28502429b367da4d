"""
Prompt templates for paper summary, chat and term definition.

Dependencies: langchain_core.prompts, langchain_core.messages
System role: Prompt templates for AI operations
"""

from collections.abc import Iterable

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage
from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder

from researchly.models.session import ChatMessage

SUMMARY_TEMPLATE = """You are a research paper assistant. Provide a comprehensive summary of the following research paper. Include:
1. Main objective/research question
2. Methodology used
3. Key findings
4. Conclusions and implications
5. Limitations mentioned

Format your response in a clear, structured manner using markdown.

Research Paper Text:
{text}

Please analyze this research paper and provide a comprehensive summary."""

CHAT_SYSTEM_TEMPLATE = """You are a helpful research assistant. You have access to the attached research paper. Answer questions about this paper accurately and helpfully. If the question cannot be answered from the paper content, say so.

Paper Title: {paper_title}"""

RAG_SYSTEM_TEMPLATE = """You are a helpful research assistant. Answer questions about the research paper accurately and helpfully based on the provided context. If the question cannot be answered from the context, say so.

Paper Title: {paper_title}

Relevant Context from the Paper:
{context}"""

DEFINE_TEMPLATE = """You are a research paper assistant. Define and explain the following term or concept in the context of the research paper titled "{paper_title}".

{context_section}

Term to define: "{term}"

Provide a clear, concise definition (2-4 sentences). If the term has a specific meaning within this paper's context, explain that. Include the general academic/scientific definition as well."""

SUMMARY_PROMPT = ChatPromptTemplate.from_messages([("human", SUMMARY_TEMPLATE)])

DIRECT_CHAT_PROMPT = ChatPromptTemplate.from_messages([
    ("system", CHAT_SYSTEM_TEMPLATE + "\n\nPaper Content:\n{document_text}"),
    MessagesPlaceholder("history"),
    ("human", "{question}"),
])

CACHED_CHAT_PROMPT = ChatPromptTemplate.from_messages([
    MessagesPlaceholder("history"),
    ("human", "{question}"),
])

RAG_CHAT_PROMPT = ChatPromptTemplate.from_messages([
    ("system", RAG_SYSTEM_TEMPLATE),
    MessagesPlaceholder("history"),
    ("human", "{question}"),
])

DEFINE_PROMPT = ChatPromptTemplate.from_messages([("human", DEFINE_TEMPLATE)])


def chat_system_instruction(paper_title: str) -> str:
    """System instruction stored with a paper's context cache."""
    return CHAT_SYSTEM_TEMPLATE.format(paper_title=paper_title)


def to_history(messages: Iterable[ChatMessage]) -> list[BaseMessage]:
    """Convert stored chat turns to LangChain messages, preserving order."""
    return [
        HumanMessage(content=m.content) if m.role == "user" else AIMessage(content=m.content)
        for m in messages
    ]


def define_context_section(surrounding: str | None, passages: list[str]) -> str:
    """
    Build the grounding section of a definition prompt.

    Args:
        surrounding: Optional caller-supplied text around the term
        passages: Retrieved passages (may be empty)

    Returns:
        str: Context section, "" when there is nothing to add
    """
    section = ""
    if surrounding:
        section = f'Surrounding context from the paper:\n"{surrounding}"'
    if passages:
        section += "\n\nRelevant sections from the paper:\n" + "\n\n".join(passages)
    return section.strip()
