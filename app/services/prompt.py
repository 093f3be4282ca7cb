# app/services/prompt.py
from langchain_core.documents import Document
from langchain_core.prompts import PromptTemplate
from typing import Sequence

from app.schemas.chat import ChatMessage

SYSTEM_TEMPLATE = """
You are a code reviewer who helps developers understand a GitHub repository.
Answer the user's question with a detailed, ACCURATE explanation, using ONLY
the code context and the conversation history given below.
Read the context before answering and think step by step.
If the context and the conversation are not enough to answer, say so plainly
instead of guessing. Do not use any other information.

The context (code excerpts from the repository) is enclosed in triple quotes.
It may be empty; an empty context means no code was found for this question.

\"\"\"
Context: {context}
\"\"\"

The conversation history is enclosed in triple quotes:

\"\"\"
Conversation History:
{chat_history}
\"\"\"

The user's question is enclosed in triple quotes:

\"\"\"
User: {question}
\"\"\"

Keep the three parts apart: the context is code from the repository, the
conversation history is what was said before, and the question is what you
must answer now. The context can be very long; it is still only context.
Say where your answer comes from (file, function or excerpt).

Format the whole response as valid Markdown.
Wrap code in triple backticks tagged with its language (python, typescript, etc.).
"""

prompt_template = PromptTemplate.from_template(SYSTEM_TEMPLATE)


# -------------------------
# Helpers
# -------------------------
def format_message(message: ChatMessage) -> str:
    return f"{message.role}: {message.content}"


def serialize_history(history: Sequence[ChatMessage]) -> str:
    """Oldest first, one "<role>: <content>" line per message."""
    return "\n".join(format_message(m) for m in history)


def format_documents(docs: Sequence[Document]) -> str:
    # Retrieval order, no dedup; "" when nothing was retrieved
    return "\n\n".join(d.page_content for d in docs)


# -------------------------
# Main assembler
# -------------------------
def assemble(
    context: Sequence[Document],
    history: Sequence[ChatMessage],
    question: str,
) -> str:
    """
    Render the system instruction for one request.
    Pure: same inputs → same prompt.
    """
    return prompt_template.format(
        context=format_documents(context),
        chat_history=serialize_history(history),
        question=question,
    )
