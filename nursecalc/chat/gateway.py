# nursecalc/chat/gateway.py
from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from openai import OpenAI, APITimeoutError
from pydantic import ValidationError

from nursecalc.chat.models import ChatContext, ChatMessage
from nursecalc.utils.events import publish
from nursecalc.utils.llm_status import record_llm_call_start, record_llm_call_end
from nursecalc.valuation.contracts import ContractInput
from nursecalc.valuation.engine import ContractValuationEngine

FINANCIAL_KEYWORDS = ("calculate", "income", "expenses", "tax")

SYSTEM_PROMPT = """You are a helpful assistant specialized in travel nurse contracts. You are provided with the CURRENT contract data in each new conversation - this is the ONLY valid contract data you should reference.

CRITICAL RULES:
1. ONLY use the contract data provided in THIS conversation. Disregard any contract information from previous conversations.
2. DO NOT reference historical data about contracts that is not included in the current dataset.
3. The contracts array provided in THIS conversation contains the ONLY currently valid contracts.
4. When a user mentions a contract that's not in the current dataset, inform them it's not available and ONLY suggest contracts from the current dataset.
5. If contract names have changed (e.g., a facility was renamed), only acknowledge the CURRENT names in the dataset.

For user preferences (like location preferences, pay requirements, name, etc):
- DO maintain these across conversations
- DO use these to personalize recommendations
- DO NOT use past contract knowledge, only current contracts
{financial}
Always format your responses using Markdown: headers for sections, bullet points for lists, bold for important figures, code blocks for calculations and tables for comparing contracts.

Keep responses concise but informative."""

FINANCIAL_ADDENDUM = """
For financial calculations:
- Make calculations step by step
- Show your work clearly
- Base all calculations ONLY on data from the current contracts
- For tax estimates, use a standard 30% rate for taxable income unless user specifies otherwise
- Be precise with all numerical values and include proper units ($, weeks, etc.)
"""

MessageLike = Union[ChatMessage, Dict[str, Any]]
ContextLike = Union[ChatContext, Dict[str, Any]]


class ChatGatewayError(RuntimeError):
    pass


def _as_dict(m: MessageLike) -> Dict[str, str]:
    if isinstance(m, ChatMessage):
        return m.as_openai()
    return {"role": str(m.get("role", "user")), "content": str(m.get("content", ""))}


def is_financial_calculation(messages: Iterable[MessageLike]) -> bool:
    for m in messages:
        d = _as_dict(m)
        if d["role"] == "user" and any(k in d["content"].lower() for k in FINANCIAL_KEYWORDS):
            return True
    return False


def build_chat_context(contracts: Iterable[ContractInput],
                       engine: Optional[ContractValuationEngine] = None) -> ChatContext:
    """Raw contract fields plus everything the engine derives from them."""
    eng = engine or ContractValuationEngine()
    rows = []
    for c in contracts:
        row = c.to_dict()
        row["metrics"] = eng.evaluate(c).to_dict()
        rows.append(row)
    return ChatContext(contracts=rows, total_contracts=len(rows))


def _is_timeout(e: Exception) -> bool:
    if isinstance(e, (APITimeoutError, TimeoutError)):
        return True
    msg = str(e)
    return any(t in msg.lower() for t in ("timeout", "timed out")) or "ETIMEDOUT" in msg


class ChatGateway:
    """
    One entry point for the contract assistant. `send(..., stream=True)` yields
    server-sent-event style dicts (start / chunk / end / error); otherwise the
    full reply text is returned.
    """
    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None,
                 client: Any = None, timeout: float = 60.0):
        self.api_key = api_key or os.environ.get("OPENAI_API_KEY")
        self.model = model or os.environ.get("OPENAI_MODEL", "gpt-4o-mini")
        self.timeout = timeout
        self._client = client

    def client(self):
        if self._client is None:
            if not self.api_key:
                raise ChatGatewayError("OpenAI API key not configured")
            self._client = OpenAI(api_key=self.api_key, timeout=self.timeout)
        return self._client

    def build_request(self, messages: List[MessageLike], context: ContextLike,
                      now: Optional[datetime] = None) -> Tuple[List[Dict[str, str]], float, int]:
        if not isinstance(context, ChatContext):
            context = ChatContext.model_validate(context or {})
        financial = is_financial_calculation(messages)
        stamp = (now or datetime.now(timezone.utc)).isoformat()

        system = {"role": "system",
                  "content": SYSTEM_PROMPT.format(financial=FINANCIAL_ADDENDUM if financial else "")}
        data = {"role": "system",
                "content": (f"CURRENT CONTRACT DATA ({stamp}): The following represents ALL current contracts "
                            f"({context.total_contracts} total). ONLY reference these contracts and IGNORE any "
                            f"contract knowledge from previous conversations: "
                            f"{json.dumps(context.contracts, ensure_ascii=False, default=str)}")}
        # client-side system messages are never forwarded
        convo = [d for d in (_as_dict(m) for m in messages) if d["role"] != "system"]

        temperature = 0.3 if financial else 0.7
        max_tokens = 1500 if financial else 1000
        return [system, data, *convo], temperature, max_tokens

    def send(self, messages: List[MessageLike], context: ContextLike, stream: bool = False):
        if stream:
            return self._stream(messages, context)
        return self._complete(messages, context)

    def _complete(self, messages: List[MessageLike], context: ContextLike) -> str:
        payload, temperature, max_tokens = self.build_request(messages, context)
        client = self.client()
        print(f"[CHAT] request model={self.model} messages={len(payload)} temperature={temperature}", flush=True)
        record_llm_call_start(self.model)
        try:
            resp = client.chat.completions.create(
                model=self.model,
                messages=payload,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except Exception as e:
            record_llm_call_end(False, repr(e))
            publish("ChatFailed", {"model": self.model, "error": repr(e)})
            error = "Request timed out" if _is_timeout(e) else "Failed to get response from OpenAI"
            raise ChatGatewayError(error) from e

        content = None
        try:
            content = resp.choices[0].message.content
        except (AttributeError, IndexError, TypeError):
            pass
        if not content:
            record_llm_call_end(False, "empty response")
            raise ChatGatewayError("No content in response from server")

        record_llm_call_end(True)
        publish("ChatCompleted", {"model": self.model, "chars": len(content), "stream": False})
        return content

    def _stream(self, messages: List[MessageLike], context: ContextLike) -> Iterator[Dict[str, Any]]:
        try:
            payload, temperature, max_tokens = self.build_request(messages, context)
            client = self.client()
        except ChatGatewayError as e:
            yield {"type": "error", "error": "OpenAI API key is required", "details": str(e)}
            return
        except ValidationError as e:
            yield {"type": "error", "error": "Invalid chat context", "details": str(e)}
            return

        yield {"type": "start"}
        record_llm_call_start(self.model)
        full = []
        try:
            completion = client.chat.completions.create(
                model=self.model,
                messages=payload,
                temperature=temperature,
                max_tokens=max_tokens,
                stream=True,
            )
            for chunk in completion:
                choices = getattr(chunk, "choices", None) or []
                delta = getattr(choices[0], "delta", None) if choices else None
                piece = getattr(delta, "content", None) if delta is not None else None
                if piece:
                    full.append(piece)
                    yield {"type": "chunk", "content": piece}
        except Exception as e:
            record_llm_call_end(False, repr(e))
            publish("ChatFailed", {"model": self.model, "error": repr(e), "stream": True})
            timeout = _is_timeout(e)
            event = {
                "type": "error",
                "error": "Request timed out" if timeout else "Failed to process chat request",
                "details": str(e) or e.__class__.__name__,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
            if timeout:
                event["suggestion"] = "Try breaking your request into smaller, more specific questions"
            yield event
            return

        record_llm_call_end(True)
        content = "".join(full)
        publish("ChatCompleted", {"model": self.model, "chars": len(content), "stream": True})
        yield {"type": "end", "content": content}
