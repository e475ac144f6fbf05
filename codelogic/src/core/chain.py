"""
CodeLogic - Answer Chain
=========================
LangChain Expression Language pipeline that turns
``{"question", "chat_history"}`` into answer text:

    1. Condense  → standalone question (skipped when there is no history)
    2. Retrieve  → the request's ``GroundedRetriever``
    3. Answer    → QA prompt over the numbered passages

The retriever is the only place documents enter the chain, so whatever
it captured is exactly what the model saw.
"""

from __future__ import annotations

from operator import itemgetter

from langchain_core.documents import Document
from langchain_core.language_models import BaseChatModel
from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate
from langchain_core.retrievers import BaseRetriever
from langchain_core.runnables import Runnable, RunnableBranch, RunnablePassthrough

from codelogic.config.prompt_templates import CONDENSE_QUESTION_TEMPLATE, NO_CONTEXT_MARKER, QA_TEMPLATE
from codelogic.src.utils.text_utils import format_documents

CONDENSE_QUESTION_PROMPT = ChatPromptTemplate.from_template(CONDENSE_QUESTION_TEMPLATE)
QA_PROMPT = ChatPromptTemplate.from_template(QA_TEMPLATE)


def _render_context(documents: list[Document]) -> str:
    return format_documents(documents, empty=NO_CONTEXT_MARKER)


def build_answer_chain(llm: BaseChatModel, retriever: BaseRetriever) -> Runnable:
    """Assemble the condense → retrieve → answer chain for one request."""
    condense_question = CONDENSE_QUESTION_PROMPT | llm | StrOutputParser()

    standalone_question = RunnableBranch(
        (lambda inputs: bool(inputs.get("chat_history")), condense_question),
        itemgetter("question"),
    )

    return (
        RunnablePassthrough.assign(standalone_question=standalone_question)
        | RunnablePassthrough.assign(context=itemgetter("standalone_question") | retriever | _render_context)
        | QA_PROMPT
        | llm
        | StrOutputParser()
    ).with_config(run_name="codelogic_answer_chain")
