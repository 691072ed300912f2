"""
Accountant Agent

DESIGN DECISION: The LLM is a TRANSLATOR, not an ORACLE.
It turns the family's question into tool calls and turns the tool
results back into an answer. Every figure in an answer comes from
ToolExecutor, which runs the calculators on stored records.

FLOW:
1. Question -> Gemini, with the tool declarations attached
2. Gemini asks for function calls -> ToolExecutor runs them
3. Results go back to Gemini as function responses
4. Repeat until Gemini answers in text, or the round limit is hit

CRITICAL BOUNDARIES:
- CAN: Choose tools and arguments, explain results
- CANNOT: Write to storage (no tool writes)
- CANNOT: Loop forever (max_tool_rounds)
"""

from collections.abc import Mapping, Sequence
from typing import Any, Optional
from uuid import UUID

import google.generativeai as genai
from pydantic import BaseModel, Field

from family_accountant.agents.prompts import build_system_prompt
from family_accountant.audit import AuditLogger, create_correlation_id
from family_accountant.config import get_settings
from family_accountant.tools import ToolExecutor, function_declarations

ROUND_LIMIT_ANSWER = (
    "I couldn't finish working that out within the allowed number of steps. "
    "Could you ask a narrower question?"
)
UNAVAILABLE_ANSWER = "Sorry, the assistant is unavailable right now. Please try again shortly."
DEFAULT_MAX_TOOL_ROUNDS = 5


class AgentAnswer(BaseModel):
    """One answered chat turn."""

    answer: str
    correlation_id: UUID
    tools_used: list[str] = Field(default_factory=list)
    rounds: int = 0
    hit_round_limit: bool = False
    error: Optional[str] = None


def to_plain(value: Any) -> Any:
    """
    Convert function call arguments (proto map/list wrappers) to plain
    dicts and lists.
    """
    if isinstance(value, Mapping):
        return {str(k): to_plain(v) for k, v in value.items()}
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        return [to_plain(v) for v in value]
    return value


def _function_calls(response) -> list:
    calls = []
    for part in getattr(response, "parts", None) or []:
        call = getattr(part, "function_call", None)
        if call is not None and getattr(call, "name", ""):
            calls.append(call)
    return calls


def _text(response) -> str:
    texts = [getattr(part, "text", "") for part in getattr(response, "parts", None) or []]
    return "".join(t for t in texts if t).strip()


class AccountantAgent:
    """
    Chat agent answering questions about the family's finances.

    RESPONSIBILITIES:
    - Send the question to Gemini with the tool declarations
    - Run requested tools through ToolExecutor
    - Audit the question, each tool call and the answer
    """

    def __init__(
        self,
        executor: ToolExecutor,
        audit_logger: Optional[AuditLogger] = None,
        model: Optional[Any] = None,
        max_tool_rounds: Optional[int] = None,
    ):
        """
        Args:
            executor: Runs the tool calls
            audit_logger: Audit trail (local-only if omitted)
            model: A GenerativeModel (or anything with start_chat()).
                Built from GeminiSettings if omitted.
            max_tool_rounds: Override GEMINI_MAX_TOOL_ROUNDS
        """
        self._executor = executor
        self._audit = audit_logger or AuditLogger()

        if model is None:
            settings = get_settings().gemini
            model = self._configure_genai(settings)
            max_tool_rounds = max_tool_rounds or settings.max_tool_rounds
        self._model = model
        self._max_rounds = max_tool_rounds or DEFAULT_MAX_TOOL_ROUNDS

    @staticmethod
    def _configure_genai(settings):
        """Configure Google Generative AI."""
        genai.configure(api_key=settings.api_key)
        return genai.GenerativeModel(
            model_name=settings.model_name,
            generation_config={
                "temperature": settings.temperature,
                "max_output_tokens": settings.max_tokens,
            },
            system_instruction=build_system_prompt(),
            tools=[{"function_declarations": function_declarations()}],
        )

    async def ask(self, question: str, history: Optional[list] = None) -> AgentAnswer:
        """
        Answer one question.

        Args:
            question: The user's message
            history: Earlier turns in the form start_chat(history=...) accepts

        Never raises for model or tool failures; the answer says what happened.
        """
        correlation_id = create_correlation_id()
        await self._audit.log_question(question, correlation_id)

        tools_used: list[str] = []
        rounds = 0

        try:
            chat = self._model.start_chat(history=history or [])
            response = await chat.send_message_async(question)

            while True:
                calls = _function_calls(response)
                if not calls:
                    break
                if rounds >= self._max_rounds:
                    await self._audit.log_response(tools_used, correlation_id)
                    return AgentAnswer(
                        answer=ROUND_LIMIT_ANSWER,
                        correlation_id=correlation_id,
                        tools_used=tools_used,
                        rounds=rounds,
                        hit_round_limit=True,
                    )

                rounds += 1
                parts = []
                for call in calls:
                    tools_used.append(call.name)
                    result = await self._executor.execute(
                        call.name,
                        to_plain(call.args),
                        correlation_id,
                    )
                    parts.append(genai.protos.Part(
                        function_response=genai.protos.FunctionResponse(
                            name=call.name,
                            response={"result": result},
                        )
                    ))
                response = await chat.send_message_async(parts)

        except Exception as e:
            await self._audit.log_external_service_error("gemini", str(e), correlation_id)
            return AgentAnswer(
                answer=UNAVAILABLE_ANSWER,
                correlation_id=correlation_id,
                tools_used=tools_used,
                rounds=rounds,
                error=str(e),
            )

        await self._audit.log_response(tools_used, correlation_id)
        return AgentAnswer(
            answer=_text(response) or "I don't have an answer for that.",
            correlation_id=correlation_id,
            tools_used=tools_used,
            rounds=rounds,
        )
